"""
Chunked multipart upload orchestration.

Contains request validation, the chunked uploader, domain models and errors.
"""

from .errors import (
    PartUploadError,
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
    UploadBackendError,
    UploadError,
    UploadFinalizationError,
    UploadInitiationError,
    UploadTransportError,
    UploadValidationError,
)
from .models import ObjectReference, PartRecord, UploadSession, UploadState
from .uploader import ChunkedUploader, MultipartBackend, iter_parts
from .validation import UploadRequest, filename_extension, validate_upload_request

__all__ = [
    "ChunkedUploader",
    "MultipartBackend",
    "ObjectReference",
    "PartRecord",
    "PartUploadError",
    "PayloadTooLargeError",
    "UnsupportedMediaTypeError",
    "UploadBackendError",
    "UploadError",
    "UploadFinalizationError",
    "UploadInitiationError",
    "UploadRequest",
    "UploadSession",
    "UploadState",
    "UploadTransportError",
    "UploadValidationError",
    "filename_extension",
    "iter_parts",
    "validate_upload_request",
]
