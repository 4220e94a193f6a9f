"""
Domain models for multipart uploads.

These models have no dependencies on FastAPI or boto3. An UploadSession is
owned by exactly one request flow; PartRecord and ObjectReference are values.
"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4


class UploadState(Enum):
    """Lifecycle of an upload session."""
    INIT = "init"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PartRecord:
    """
    One part acknowledged by the object store.

    The etag is opaque; it has to be handed back verbatim when the
    upload is completed.
    """
    part_number: int
    etag: str

    def __post_init__(self) -> None:
        if self.part_number < 1:
            raise ValueError("Part numbers start at 1")
        if not self.etag:
            raise ValueError("Part etag cannot be empty")


@dataclass(frozen=True)
class ObjectReference:
    """A finalized object and where it can be retrieved from."""
    key: str
    location: str


@dataclass
class UploadSession:
    """
    An in-progress multipart upload.

    Parts are appended in acknowledgment order, which is also part number
    order because parts are uploaded one at a time.
    """
    key: str
    content_type: str
    upload_id: str
    parts: list[PartRecord] = field(default_factory=list)
    state: UploadState = UploadState.INIT
    bytes_received: int = 0

    @property
    def next_part_number(self) -> int:
        return len(self.parts) + 1

    def record_part(self, part_number: int, etag: str, size: int) -> PartRecord:
        """Append an acknowledged part. Part numbers must not skip or repeat."""
        if self.state is not UploadState.STREAMING:
            raise ValueError(f"Cannot record parts in state {self.state.value}")
        if part_number != self.next_part_number:
            raise ValueError(
                f"Expected part {self.next_part_number}, got {part_number}"
            )

        record = PartRecord(part_number=part_number, etag=etag)
        self.parts.append(record)
        self.bytes_received += size
        return record

    def complete(self, location: str) -> ObjectReference:
        """Mark the session done and produce the reference handed to callers."""
        if self.state is not UploadState.FINALIZING:
            raise ValueError(f"Cannot complete session in state {self.state.value}")

        self.state = UploadState.DONE
        return ObjectReference(key=self.key, location=location)

    def fail(self) -> None:
        self.state = UploadState.FAILED


def generate_object_key(extension: str = "") -> str:
    """Fresh, collision-resistant object key: a random UUID plus the suffix."""
    return f"{uuid4()}{extension}"
