"""Upload validation for image-manipulation requests.

Validation behavior:
- Rejects uploads above the configured size ceiling (10 MB by default),
  reading at most one byte past the ceiling.
- Accepts any declared `image/*` media type as-is.
- For a missing or generic declared type (`application/octet-stream`), sniffs
  the bytes with Pillow and accepts them when they decode as a known image
  format.
- Everything else is rejected as "not an image".

Error handling strategy:
- Failures raise `UploadRejected` carrying the client-facing message; the HTTP
  adapter turns it into a 400 response.
"""

import io
from typing import Optional

from PIL import Image, UnidentifiedImageError

from imagestudio.llm.provider_config import MAX_UPLOAD_SIZE_BYTES


GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}

NOT_AN_IMAGE = "Only image files are allowed!"


def too_large_message(max_bytes: int) -> str:
    return f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB."


class UploadRejected(ValueError):
    """Uploaded file failed validation; `str(exc)` is the client message."""


def _sniff_image_type(data: bytes) -> Optional[str]:
    try:
        with Image.open(io.BytesIO(data)) as img:
            return Image.MIME.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        return None


def validate_upload(
    data: bytes,
    content_type: Optional[str],
    max_bytes: int = MAX_UPLOAD_SIZE_BYTES,
) -> str:
    """Validate uploaded bytes and return the media type to forward upstream.

    Raises:
        UploadRejected: Oversized upload or non-image content.
    """
    if len(data) > max_bytes:
        raise UploadRejected(too_large_message(max_bytes))

    declared = (content_type or "").split(";", 1)[0].strip().lower()
    if declared.startswith("image/"):
        return declared

    if declared in GENERIC_CONTENT_TYPES:
        sniffed = _sniff_image_type(data)
        if sniffed:
            return sniffed

    raise UploadRejected(NOT_AN_IMAGE)


async def read_upload(upload, max_bytes: int = MAX_UPLOAD_SIZE_BYTES) -> bytes:
    """Read an uploaded file without loading more than `max_bytes + 1` bytes.

    A known `size` above the ceiling is rejected before any read. Otherwise the
    extra byte lets `validate_upload` detect the oversize.

    Raises:
        UploadRejected: Declared size exceeds `max_bytes`.
    """
    size = getattr(upload, "size", None)
    if size is not None and size > max_bytes:
        raise UploadRejected(too_large_message(max_bytes))
    return await upload.read(max_bytes + 1)
