"""
Shared fixtures for unit tests.

RecordingStorage is the in-memory mock store with a call log and switches
to make individual operations fail, so tests can assert exactly which
backend calls a request made.
"""

from typing import AsyncIterator, Iterable, Optional

import pytest

from media_relay.core.upload.models import PartRecord
from media_relay.infrastructure.storage.client import MockStorageClient, StorageError


class RecordingStorage(MockStorageClient):
    """Mock storage that logs every call and can be told to fail."""

    def __init__(self) -> None:
        super().__init__(bucket_name="test-bucket")
        self.calls: list[tuple] = []
        self.part_sizes: list[int] = []
        self.completed_parts: list[list[PartRecord]] = []
        self.fail_on_create = False
        self.fail_on_part: Optional[int] = None
        self.fail_on_complete = False
        self.fail_on_abort = False
        self.connection_ok = True

    @property
    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def create_multipart_upload(self, key: str, content_type: str) -> str:
        self.calls.append(("create", key, content_type))
        if self.fail_on_create:
            raise StorageError("create refused")
        return await super().create_multipart_upload(key, content_type)

    async def upload_part(self, key: str, upload_id: str, part_number: int, data: bytes) -> str:
        self.calls.append(("upload_part", key, part_number))
        if self.fail_on_part == part_number:
            raise StorageError(f"part {part_number} refused")
        self.part_sizes.append(len(data))
        return await super().upload_part(key, upload_id, part_number, data)

    async def complete_multipart_upload(
        self,
        key: str,
        upload_id: str,
        parts: list[PartRecord],
    ) -> str:
        self.calls.append(("complete", key, len(parts)))
        self.completed_parts.append(list(parts))
        if self.fail_on_complete:
            raise StorageError("complete refused")
        return await super().complete_multipart_upload(key, upload_id, parts)

    async def abort_multipart_upload(self, key: str, upload_id: str) -> None:
        self.calls.append(("abort", key))
        if self.fail_on_abort:
            raise StorageError("abort refused")
        await super().abort_multipart_upload(key, upload_id)

    async def check_connection(self) -> bool:
        self.calls.append(("check_connection",))
        return self.connection_ok


async def stream_of(pieces: Iterable[bytes]) -> AsyncIterator[bytes]:
    """Async byte stream yielding the given pieces, like an ASGI body."""
    for piece in pieces:
        yield piece


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def make_stream():
    return stream_of
