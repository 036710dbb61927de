from io import BytesIO

import pytest
from PIL import Image

from utils.image_tools import compress_image_bytes, content_type_for_key


def _image_bytes(fmt: str, mode: str = "RGB") -> bytes:
    buf = BytesIO()
    Image.new(mode, (32, 24), color=(200, 10, 10, 255)[: len(mode)]).save(buf, fmt)
    return buf.getvalue()


def test_png_with_alpha_becomes_jpeg():
    data, ext = compress_image_bytes(_image_bytes("PNG", "RGBA"))

    assert ext == "jpg"
    img = Image.open(BytesIO(data))
    assert img.format == "JPEG"
    assert img.mode == "RGB"
    assert img.size == (32, 24)


def test_webp_stays_webp():
    data, ext = compress_image_bytes(_image_bytes("WEBP"))

    assert ext == "webp"
    assert Image.open(BytesIO(data)).format == "WEBP"


def test_non_image_is_rejected():
    with pytest.raises(ValueError):
        compress_image_bytes(b"plain text, not a picture")


def test_content_type_follows_extension():
    assert content_type_for_key("profiles/1/a.webp") == "image/webp"
    assert content_type_for_key("profiles/1/a.jpg") == "image/jpeg"
