"""
Chunked multipart uploader.

Streams a request body of unknown length into the object store one part at
a time. Memory use is bounded by the chunk size, not by the upload size:
each part is uploaded as soon as it is full and then dropped.

Parts are uploaded strictly in sequence. Part N+1 is not read until part N
has been acknowledged, so the completion request always lists parts
1..N in order with no gaps.
"""

import asyncio
import logging
from contextlib import aclosing
from typing import AsyncIterable, AsyncIterator, Optional, Protocol

from .errors import (
    PartUploadError,
    PayloadTooLargeError,
    UploadError,
    UploadFinalizationError,
    UploadInitiationError,
    UploadTransportError,
)
from .models import ObjectReference, PartRecord, UploadSession, UploadState, generate_object_key

logger = logging.getLogger(__name__)

MIB = 1024 * 1024

# S3 rejects non-final parts smaller than this.
MIN_PART_SIZE = 5 * MIB
MAX_CONTENT_SIZE = 2500 * MIB


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class MultipartBackend(Protocol):
    """
    The object store operations the uploader needs.

    The uploader doesn't know whether this is S3, R2, MinIO or an
    in-memory fake.
    """

    async def create_multipart_upload(self, key: str, content_type: str) -> str:
        """Start a multipart upload and return its upload id."""
        ...

    async def upload_part(
        self,
        key: str,
        upload_id: str,
        part_number: int,
        data: bytes,
    ) -> str:
        """Upload one part and return its etag."""
        ...

    async def complete_multipart_upload(
        self,
        key: str,
        upload_id: str,
        parts: list[PartRecord],
    ) -> str:
        """Assemble the parts into the final object and return its location."""
        ...

    async def abort_multipart_upload(self, key: str, upload_id: str) -> None:
        """Discard an unfinished upload and any parts stored for it."""
        ...


# ---------------------------------------------------------------------------
# Part slicing
# ---------------------------------------------------------------------------

async def iter_parts(
    stream: AsyncIterable[bytes],
    chunk_size: int,
    limit: Optional[int] = None,
) -> AsyncIterator[tuple[bytes, bool]]:
    """
    Re-slice an async byte stream into (part, is_last) pairs.

    Every part except the last is exactly chunk_size bytes. A full part is
    only released once more data is known to follow, so n > 0 bytes give
    ceil(n / chunk_size) parts and an empty stream gives a single empty
    last part.

    Raises:
        PayloadTooLargeError: more than limit bytes were received
        UploadTransportError: the underlying stream failed
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")

    buffer = bytearray()
    received = 0

    try:
        async for piece in stream:
            if not piece:
                continue

            received += len(piece)
            if limit is not None and received > limit:
                raise PayloadTooLargeError(received, limit)

            buffer.extend(piece)
            while len(buffer) > chunk_size:
                part = bytes(buffer[:chunk_size])
                del buffer[:chunk_size]
                yield part, False
    except UploadError:
        raise
    except Exception as e:
        raise UploadTransportError(f"Reading request body failed: {e}") from e

    yield bytes(buffer), True


# ---------------------------------------------------------------------------
# Uploader
# ---------------------------------------------------------------------------

class ChunkedUploader:
    """
    Owns the multipart upload lifecycle for one request at a time.

    The uploader itself holds no per-request state, so a single instance
    can serve concurrent requests. Each call to upload() creates its own
    UploadSession.

    On any failure (including cancellation of the request task) the
    session is aborted on a best-effort basis so no orphaned multipart
    upload is left behind, and the original error is re-raised. Nothing is
    retried.
    """

    def __init__(
        self,
        storage: MultipartBackend,
        chunk_size: int = MIN_PART_SIZE,
        max_content_size: Optional[int] = MAX_CONTENT_SIZE,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")

        self._storage = storage
        self._chunk_size = chunk_size
        self._max_content_size = max_content_size

    async def upload(
        self,
        stream: AsyncIterable[bytes],
        content_type: str,
        extension: str = "",
    ) -> ObjectReference:
        """
        Stream the body into a new object and return its reference.

        Raises:
            UploadInitiationError: the multipart upload could not be started
            UploadTransportError: reading the body failed
            PayloadTooLargeError: the body exceeded max_content_size
            PartUploadError: a part upload failed
            UploadFinalizationError: completing the upload failed
        """
        session = await self._initiate(generate_object_key(extension), content_type)

        try:
            session.state = UploadState.STREAMING
            parts = iter_parts(stream, self._chunk_size, self._max_content_size)
            async with aclosing(parts):
                async for data, is_last in parts:
                    await self._upload_part(session, data, is_last)

            session.state = UploadState.FINALIZING
            reference = await self._finalize(session)
        except BaseException as e:
            session.fail()
            logger.error(
                "Upload failed",
                extra={
                    "key": session.key,
                    "upload_id": session.upload_id,
                    "parts_uploaded": len(session.parts),
                    "bytes_received": session.bytes_received,
                    "error": str(e) or type(e).__name__,
                }
            )
            await self._abort(session)
            raise

        logger.info(
            "Upload completed",
            extra={
                "key": reference.key,
                "parts": len(session.parts),
                "size_bytes": session.bytes_received,
            }
        )

        return reference

    async def _initiate(self, key: str, content_type: str) -> UploadSession:
        # Shielded: a create already in flight still finishes on cancellation,
        # and the upload it opened is aborted before CancelledError propagates.
        create = asyncio.ensure_future(
            self._storage.create_multipart_upload(key, content_type)
        )

        try:
            upload_id = await asyncio.shield(create)
        except asyncio.CancelledError:
            await self._abort_pending_create(key, content_type, create)
            raise
        except Exception as e:
            logger.error(
                "Failed to start multipart upload",
                extra={"key": key, "error": str(e)}
            )
            raise UploadInitiationError(key) from e

        logger.info(
            "Multipart upload started",
            extra={"key": key, "upload_id": upload_id, "content_type": content_type}
        )

        return UploadSession(key=key, content_type=content_type, upload_id=upload_id)

    async def _upload_part(self, session: UploadSession, data: bytes, is_last: bool) -> None:
        part_number = session.next_part_number

        try:
            etag = await self._storage.upload_part(
                session.key,
                session.upload_id,
                part_number,
                data,
            )
        except Exception as e:
            raise PartUploadError(session.key, part_number) from e

        try:
            session.record_part(part_number, etag, len(data))
        except ValueError as e:
            # store acknowledged the part without a usable etag
            raise PartUploadError(session.key, part_number) from e

        logger.debug(
            "Uploaded part",
            extra={
                "key": session.key,
                "part_number": part_number,
                "size_bytes": len(data),
                "last_part": is_last,
            }
        )

    async def _finalize(self, session: UploadSession) -> ObjectReference:
        try:
            location = await self._storage.complete_multipart_upload(
                session.key,
                session.upload_id,
                list(session.parts),
            )
        except Exception as e:
            raise UploadFinalizationError(session.key) from e

        return session.complete(location)

    async def _abort_pending_create(
        self,
        key: str,
        content_type: str,
        create: "asyncio.Future[str]",
    ) -> None:
        try:
            upload_id = await create
        except Exception:
            # nothing was opened
            return

        session = UploadSession(key=key, content_type=content_type, upload_id=upload_id)
        session.fail()
        await self._abort(session)

    async def _abort(self, session: UploadSession) -> None:
        """Best effort: a failed abort is logged, never raised."""
        try:
            await self._storage.abort_multipart_upload(session.key, session.upload_id)
        except Exception as e:
            logger.warning(
                "Failed to abort multipart upload",
                extra={
                    "key": session.key,
                    "upload_id": session.upload_id,
                    "error": str(e),
                }
            )
            return

        logger.info(
            "Aborted multipart upload",
            extra={"key": session.key, "upload_id": session.upload_id}
        )
