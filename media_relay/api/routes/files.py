"""
File upload endpoint.

POST /api/v1/file takes the raw media bytes as the request body (not a
multipart form) and streams them into object storage part by part. The
body is never held in memory as a whole.

Status codes:
- 201: stored; body carries the object key and a retrieval link
- 413: declared or streamed size above the configured maximum
- 415: content type is not image/* or video/*
- 500: storage or transport failure, nothing specific leaked
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Header, HTTPException, Request, Response, status
from pydantic import BaseModel, Field

from ...core.upload.errors import (
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
    UploadError,
)
from ...core.upload.models import ObjectReference
from ...core.upload.validation import validate_upload_request
from ..dependencies import ChunkedUploaderDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class FileLink(BaseModel):
    """Where a stored object can be retrieved."""
    url: str = Field(description="Location of the stored object")


class FileCreatedResponse(BaseModel):
    """Response after storing an uploaded file."""
    key: str = Field(description="Object key of the stored file")
    links: list[FileLink] = Field(description="Retrieval links for the stored file")


def build_file_response(reference: ObjectReference) -> FileCreatedResponse:
    """Render a finalized object as the 201 response body."""
    return FileCreatedResponse(
        key=reference.key,
        links=[FileLink(url=reference.location)],
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=FileCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an image or video",
    description="Stream a raw image/* or video/* body into object storage",
)
async def upload_file(
    request: Request,
    response: Response,
    uploader: ChunkedUploaderDep,
    settings: SettingsDep,
    content_type: Annotated[Optional[str], Header()] = None,
    content_length: Annotated[Optional[int], Header()] = None,
) -> FileCreatedResponse:
    """
    Store the request body as a new object.

    The key is a fresh UUID plus an extension derived from the content
    type (e.g. ".png"), or no extension for unmapped types.
    """
    try:
        upload_request = validate_upload_request(
            content_type=content_type,
            declared_length=content_length,
            max_content_size=settings.max_content_size_bytes,
        )
    except UnsupportedMediaTypeError as e:
        logger.warning("Rejected upload", extra={"reason": str(e)})
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only image/* and video/* content types are accepted",
        )
    except PayloadTooLargeError as e:
        logger.warning("Rejected upload", extra={"reason": str(e)})
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size: {settings.max_content_size_mb}MB",
        )

    logger.info(
        "File upload started",
        extra={
            "content_type": upload_request.content_type,
            "declared_length": upload_request.declared_length,
        }
    )

    try:
        reference = await uploader.upload(
            request.stream(),
            content_type=upload_request.content_type,
            extension=upload_request.extension,
        )
    except PayloadTooLargeError:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size: {settings.max_content_size_mb}MB",
        )
    except UploadError as e:
        logger.error(f"Failed to store file: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store file",
        )

    response.headers["Accept"] = "application/octet-stream"

    return build_file_response(reference)
