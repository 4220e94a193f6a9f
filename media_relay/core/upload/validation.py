"""
Request validation for media uploads.

Runs before any storage call. Only images and videos are accepted, and a
declared Content-Length above the limit is refused up front. A missing
Content-Length is allowed through; the uploader enforces the limit on the
bytes it actually receives.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import PayloadTooLargeError, UnsupportedMediaTypeError

ALLOWED_PREFIXES = ("image/", "video/")

FILENAME_EXTENSIONS: dict[str, str] = {
    "image/gif": ".gif",
    "image/jpeg": ".jpeg",
    "image/png": ".png",
    "image/tiff": ".tiff",
    "video/quicktime": ".mov",
    "video/mpeg": ".mpeg",
    "video/mp4": ".mp4",
    "video/webm": ".webm",
}


@dataclass(frozen=True)
class UploadRequest:
    """Metadata of an accepted upload request."""
    content_type: str
    declared_length: Optional[int]
    extension: str


def media_type(content_type: str) -> str:
    """Strip parameters (``; charset=...``) and normalize case."""
    return content_type.split(";", 1)[0].strip().lower()


def filename_extension(content_type: str) -> str:
    """Object key suffix for a content type, or "" when the type is unmapped."""
    return FILENAME_EXTENSIONS.get(media_type(content_type), "")


def validate_upload_request(
    content_type: Optional[str],
    declared_length: Optional[int],
    max_content_size: int,
) -> UploadRequest:
    """
    Accept or reject an upload from its request metadata.

    Raises:
        UnsupportedMediaTypeError: content type is missing or not image/video
        PayloadTooLargeError: declared length exceeds max_content_size
    """
    if not content_type or not media_type(content_type).startswith(ALLOWED_PREFIXES):
        raise UnsupportedMediaTypeError(content_type)

    if declared_length is not None and declared_length > max_content_size:
        raise PayloadTooLargeError(declared_length, max_content_size)

    return UploadRequest(
        content_type=content_type,
        declared_length=declared_length,
        extension=filename_extension(content_type),
    )
