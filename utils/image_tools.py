# utils/image_tools.py
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError


def compress_image_bytes(
    data: bytes,
    quality: int = 80
) -> tuple[bytes, str]:
    """
    Пережимает загруженную картинку перед отправкой в хранилище:
    - поворачивает по EXIF и выбрасывает метаданные;
    - убирает альфа-канал (RGB);
    - WebP остаётся WebP, всё остальное сохраняется в JPEG.

    Возвращает (compressed_bytes, ext), где ext — "webp" или "jpg".
    Бросает ValueError, если файл не распознан как изображение.
    """
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError):
        raise ValueError("Uploaded file is not a supported image")

    orig_fmt = (img.format or "JPEG").upper()
    img = ImageOps.exif_transpose(img)

    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")

    buf = BytesIO()
    if orig_fmt == "WEBP":
        img.save(buf, "WEBP", quality=quality)
        ext = "webp"
    else:
        img.save(buf, "JPEG", quality=quality, optimize=True, progressive=True)
        ext = "jpg"

    return buf.getvalue(), ext


def content_type_for_key(key: str) -> str:
    return "image/webp" if key.endswith(".webp") else "image/jpeg"
