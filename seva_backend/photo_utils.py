"""
Image upload helpers: accepted types, size-limited reading and width limiting.

Uses Pillow (PIL) to shrink oversized raster images before they are stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import io
import logging

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from .errors import PayloadTooLargeError, UnsupportedMediaError, ValidationError

logger = logging.getLogger("seva.photo_utils")

READ_CHUNK_SIZE = 1024 * 1024  # 1 MiB

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/heic",
    "image/heif",
    "image/avif",
    "image/tiff",
    "image/bmp",
}
SVG_MIME_TYPE = "image/svg+xml"

# Clients that cannot sniff the type send one of these; fall back to the extension.
GENERIC_MIME_TYPES = {"", "application/octet-stream", "binary/octet-stream"}

EXTENSION_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "heic": "image/heic",
    "heif": "image/heif",
    "avif": "image/avif",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    "bmp": "image/bmp",
    "svg": SVG_MIME_TYPE,
}

# Formats Pillow can re-encode without extra plugins. GIF is left out so
# animations survive untouched.
RESIZABLE_FORMATS = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
    "image/bmp": "BMP",
    "image/tiff": "TIFF",
}


@dataclass
class ImageUpload:
    """An uploaded image held in memory."""

    data: bytes
    filename: str
    content_type: str

    @property
    def size(self) -> int:
        return len(self.data)


def file_extension(file_name: Optional[str]) -> str:
    if not file_name or "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].lower()


def resolve_content_type(content_type: Optional[str], file_name: Optional[str]) -> str:
    """Return the declared MIME type, or the one implied by the extension when the
    declared type is missing or generic."""
    declared = (content_type or "").split(";")[0].strip().lower()
    if declared in GENERIC_MIME_TYPES:
        return EXTENSION_MIME_TYPES.get(file_extension(file_name), declared)
    return declared


def is_allowed_image(
    content_type: Optional[str], file_name: Optional[str], allow_svg: bool = False
) -> bool:
    allowed = ALLOWED_MIME_TYPES | ({SVG_MIME_TYPE} if allow_svg else set())
    return resolve_content_type(content_type, file_name) in allowed


def validate_image(
    upload: Optional[ImageUpload], max_bytes: int, allow_svg: bool = False
) -> None:
    """Raise the matching service error when an upload cannot be stored."""
    if upload is None:
        raise ValidationError("No image file uploaded")
    if upload.size == 0:
        raise ValidationError("Uploaded image is empty")
    if upload.size > max_bytes:
        raise PayloadTooLargeError(
            f"File size is too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
        )
    if not is_allowed_image(upload.content_type, upload.filename, allow_svg):
        raise UnsupportedMediaError("Invalid file type. Only images are allowed.")


async def read_upload(file: Optional[UploadFile], max_bytes: int) -> Optional[ImageUpload]:
    """Read a multipart upload without buffering more than `max_bytes` + one chunk.

    Returns None when no file was sent.
    """
    if file is None or not file.filename:
        return None

    if file.size is not None and file.size > max_bytes:
        raise PayloadTooLargeError(
            f"File size is too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
        )

    buffer = bytearray()
    while True:
        chunk = await file.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise PayloadTooLargeError(
                f"File size is too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
            )

    return ImageUpload(
        data=bytes(buffer),
        filename=file.filename,
        content_type=resolve_content_type(file.content_type, file.filename),
    )


def guess_extension(content_type: str, file_name: Optional[str] = None) -> str:
    ext = file_extension(file_name)
    if ext in EXTENSION_MIME_TYPES:
        return ext
    for candidate, mime in EXTENSION_MIME_TYPES.items():
        if mime == content_type:
            return candidate
    return "jpg"


def limit_width(data: bytes, content_type: str, max_width: int) -> bytes:
    """Downscale raster images wider than `max_width`, keeping the aspect ratio.

    Anything Pillow cannot or will not decode (including images over
    `Image.MAX_IMAGE_PIXELS`) is returned unchanged. Blocking; call it from
    the threadpool in async code.
    """
    image_format = RESIZABLE_FORMATS.get(content_type)
    if max_width <= 0 or image_format is None:
        return data

    try:
        img = Image.open(io.BytesIO(data))
        width, height = img.size
        if width <= max_width:
            return data

        new_height = max(1, round(height * max_width / width))
        resized = img.resize((max_width, new_height), Image.LANCZOS)
        if image_format == "JPEG" and resized.mode not in ("RGB", "L"):
            resized = resized.convert("RGB")

        buffer = io.BytesIO()
        save_kwargs = {"quality": 85, "optimize": True} if image_format == "JPEG" else {}
        resized.save(buffer, format=image_format, **save_kwargs)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        logger.warning("Could not resize %s image, storing original: %s", content_type, exc)
        return data

    logger.info("Resized image from %dx%d to %dx%d", width, height, max_width, new_height)
    return buffer.getvalue()


__all__ = [
    "ALLOWED_MIME_TYPES",
    "ImageUpload",
    "guess_extension",
    "is_allowed_image",
    "limit_width",
    "read_upload",
    "resolve_content_type",
    "validate_image",
]
