import uuid
from io import BytesIO

from minio import Minio
from minio.error import S3Error

from core.config import settings
from utils.image_tools import compress_image_bytes, content_type_for_key

# ==== Настройка клиента MinIO ====
_endpoint = settings.AWS_S3_ENDPOINT_URL.replace("https://", "").replace("http://", "")
_s3 = Minio(
    _endpoint,
    access_key=settings.AWS_ACCESS_KEY_ID,
    secret_key=settings.AWS_SECRET_ACCESS_KEY,
    region=settings.AWS_S3_REGION,
    secure=settings.AWS_S3_ENDPOINT_URL.startswith("https://"),
)


class BlobStoreError(Exception):
    pass


def upload_image(data: bytes, prefix: str) -> str:
    """
    Сжимает изображение и кладёт в бакет под prefix/<uuid>.<ext>.
    Бросает ValueError, если это не изображение, BlobStoreError — при ошибке S3.
    """
    if len(data) > settings.MAX_IMAGE_BYTES:
        raise ValueError(f"Image exceeds {settings.MAX_IMAGE_BYTES} bytes")

    compressed_data, ext = compress_image_bytes(data)
    key = f"{prefix.rstrip('/')}/{uuid.uuid4().hex}.{ext}"

    try:
        _s3.put_object(
            settings.AWS_S3_BUCKET_NAME,
            key,
            BytesIO(compressed_data),
            length=len(compressed_data),
            content_type=content_type_for_key(key),
        )
    except S3Error as e:
        raise BlobStoreError(f"Upload to S3 failed: {e}") from e

    return key


def download_object(key: str) -> bytes:
    response = None
    try:
        response = _s3.get_object(settings.AWS_S3_BUCKET_NAME, key)
        return response.read()
    except S3Error as e:
        raise BlobStoreError(f"Download from S3 failed: {e}") from e
    finally:
        if response is not None:
            response.close()
            response.release_conn()


def delete_object(key: str) -> None:
    try:
        _s3.remove_object(settings.AWS_S3_BUCKET_NAME, key)
    except S3Error as e:
        raise BlobStoreError(f"Delete from S3 failed: {e}") from e
