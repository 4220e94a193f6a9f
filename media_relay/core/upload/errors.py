"""
Upload error taxonomy.

Validation errors are caused by the client and are raised before any
storage call is made. Everything else is an internal failure: the route
layer logs it and answers with a generic 500.
"""

from typing import Optional


class UploadError(Exception):
    """Base class for every failure of an upload request."""
    pass


# ---------------------------------------------------------------------------
# Client errors
# ---------------------------------------------------------------------------

class UploadValidationError(UploadError):
    """The request metadata was rejected."""
    pass


class UnsupportedMediaTypeError(UploadValidationError):
    """Content type is not an image or a video."""

    def __init__(self, content_type: Optional[str]) -> None:
        self.content_type = content_type
        super().__init__(f"Unsupported media type: {content_type!r}")


class PayloadTooLargeError(UploadValidationError):
    """
    Payload exceeds the configured maximum.

    Raised either up front from the declared Content-Length or while
    streaming, once the bytes actually received pass the limit.
    """

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Payload of {size} bytes exceeds limit of {limit} bytes")


# ---------------------------------------------------------------------------
# Internal errors
# ---------------------------------------------------------------------------

class UploadTransportError(UploadError):
    """Reading the request body failed before it was fully consumed."""
    pass


class UploadBackendError(UploadError):
    """A call to the object store failed."""
    pass


class UploadInitiationError(UploadBackendError):
    """The object store refused to start a multipart upload."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Could not start upload for {key}")


class PartUploadError(UploadBackendError):
    """A single part upload failed; the session is abandoned."""

    def __init__(self, key: str, part_number: int) -> None:
        self.key = key
        self.part_number = part_number
        super().__init__(f"Upload of part {part_number} failed for {key}")


class UploadFinalizationError(UploadBackendError):
    """The object store refused to complete the multipart upload."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Could not complete upload for {key}")
