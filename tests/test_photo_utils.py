import io

import pytest
from PIL import Image
from starlette.datastructures import Headers, UploadFile

from seva_backend.errors import PayloadTooLargeError, UnsupportedMediaError, ValidationError
from seva_backend.photo_utils import (
    ImageUpload,
    guess_extension,
    is_allowed_image,
    limit_width,
    read_upload,
    resolve_content_type,
    validate_image,
)


def _upload_file(data: bytes, filename: str, content_type: str) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.mark.parametrize(
    "content_type,file_name,expected",
    [
        ("image/png", "a.png", "image/png"),
        ("IMAGE/JPEG; charset=binary", "a.jpg", "image/jpeg"),
        ("application/octet-stream", "IMG_1.HEIC", "image/heic"),
        ("", "scan.webp", "image/webp"),
        (None, "noext", ""),
        ("application/pdf", "doc.jpg", "application/pdf"),
    ],
)
def test_resolve_content_type(content_type, file_name, expected):
    assert resolve_content_type(content_type, file_name) == expected


def test_svg_only_when_enabled():
    assert not is_allowed_image("image/svg+xml", "logo.svg")
    assert is_allowed_image("image/svg+xml", "logo.svg", allow_svg=True)


def test_validate_image_order(make_image):
    with pytest.raises(ValidationError):
        validate_image(None, 1024)
    with pytest.raises(ValidationError):
        validate_image(ImageUpload(b"", "a.jpg", "image/jpeg"), 1024)
    # size is checked before type
    with pytest.raises(PayloadTooLargeError):
        validate_image(ImageUpload(b"x" * 2048, "a.pdf", "application/pdf"), 1024)
    with pytest.raises(UnsupportedMediaError):
        validate_image(ImageUpload(b"x" * 10, "a.pdf", "application/pdf"), 1024)

    validate_image(ImageUpload(make_image(10, 10), "a.jpg", "image/jpeg"), 1024 * 1024)


def test_guess_extension():
    assert guess_extension("image/png", "photo.PNG") == "png"
    assert guess_extension("image/webp", "blob") == "webp"
    assert guess_extension("image/unknown") == "jpg"


def test_limit_width_downscales_jpeg(make_image):
    data = make_image(1000, 500)
    out = limit_width(data, "image/jpeg", 250)
    assert Image.open(io.BytesIO(out)).size == (250, 125)


def test_limit_width_keeps_narrow_and_unsupported(make_image):
    data = make_image(100, 100)
    assert limit_width(data, "image/jpeg", 250) is data
    gif = make_image(500, 100, fmt="GIF")
    assert limit_width(gif, "image/gif", 100) is gif
    assert limit_width(b"garbage", "image/png", 100) == b"garbage"


def test_limit_width_passes_decompression_bombs_through(make_image, monkeypatch):
    # Image.open refuses anything over twice this many pixels
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    bomb = make_image(150, 150, fmt="PNG", mode="1")

    assert limit_width(bomb, "image/png", 50) is bomb


@pytest.mark.asyncio
async def test_read_upload_returns_image(make_image):
    data = make_image(20, 20, fmt="PNG")
    upload = await read_upload(_upload_file(data, "pic.png", "image/png"), 1024 * 1024)

    assert upload.data == data
    assert upload.filename == "pic.png"
    assert upload.content_type == "image/png"


@pytest.mark.asyncio
async def test_read_upload_resolves_generic_type():
    upload = await read_upload(
        _upload_file(b"abc", "IMG_2.heic", "application/octet-stream"), 1024
    )
    assert upload.content_type == "image/heic"


@pytest.mark.asyncio
async def test_read_upload_without_file():
    assert await read_upload(None, 1024) is None
    assert await read_upload(_upload_file(b"", "", "image/png"), 1024) is None


@pytest.mark.asyncio
async def test_read_upload_enforces_ceiling():
    with pytest.raises(PayloadTooLargeError):
        await read_upload(_upload_file(b"x" * 4096, "big.jpg", "image/jpeg"), 1024)
