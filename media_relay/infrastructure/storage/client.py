"""
Object storage client for multipart media uploads.

Talks to any S3-compatible store (AWS S3, R2, MinIO) through boto3, with an
in-memory mock for local development.

boto3 is synchronous, so every call is pushed to a worker thread with
asyncio.to_thread. One client is shared by all requests; boto3 clients are
thread-safe and pool their own connections.
"""

import asyncio
import hashlib
import logging
from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import uuid4

from ...core.upload.models import PartRecord
from ...core.upload.uploader import MultipartBackend

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """
    Configuration for S3-compatible storage.

    Credentials and region left as None fall through to boto3's default
    resolution chain (environment, shared config, instance role).
    """
    bucket_name: str
    region: Optional[str] = None
    endpoint_url: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    storage_class: Optional[str] = None
    server_side_encryption: Optional[str] = None


class StorageClient(MultipartBackend, Protocol):
    """
    Protocol for the object store used by the API.

    Multipart operations come from MultipartBackend; the connection check
    backs the readiness check.
    """

    async def check_connection(self) -> bool:
        """Return True if the bucket is reachable."""
        ...


class S3StorageClient:
    """
    S3-compatible multipart upload client.

    Objects are always created private. Storage class and server-side
    encryption are deployment settings and never come from the caller.
    """

    def __init__(self, config: StorageConfig) -> None:
        import boto3
        from botocore.config import Config

        self._config = config

        boto_config = Config(
            signature_version='s3v4',
            retries={'mode': 'standard'},
        )

        self._s3_client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url or "aws",
            }
        )

    async def create_multipart_upload(self, key: str, content_type: str) -> str:
        params = {
            'Bucket': self._config.bucket_name,
            'Key': key,
            'ACL': 'private',
            'ContentType': content_type,
        }
        if self._config.storage_class:
            params['StorageClass'] = self._config.storage_class
        if self._config.server_side_encryption:
            params['ServerSideEncryption'] = self._config.server_side_encryption

        try:
            response = await asyncio.to_thread(
                self._s3_client.create_multipart_upload, **params
            )
        except Exception as e:
            logger.error(
                "Failed to create multipart upload",
                extra={"key": key, "error": str(e)}
            )
            raise StorageError(f"Create multipart upload failed: {e}")

        return response['UploadId']

    async def upload_part(
        self,
        key: str,
        upload_id: str,
        part_number: int,
        data: bytes,
    ) -> str:
        try:
            response = await asyncio.to_thread(
                self._s3_client.upload_part,
                Bucket=self._config.bucket_name,
                Key=key,
                UploadId=upload_id,
                PartNumber=part_number,
                Body=data,
                ContentLength=len(data),
            )
        except Exception as e:
            logger.error(
                "Failed to upload part",
                extra={
                    "key": key,
                    "part_number": part_number,
                    "size_bytes": len(data),
                    "error": str(e),
                }
            )
            raise StorageError(f"Upload part failed: {e}")

        return response['ETag']

    async def complete_multipart_upload(
        self,
        key: str,
        upload_id: str,
        parts: list[PartRecord],
    ) -> str:
        try:
            response = await asyncio.to_thread(
                self._s3_client.complete_multipart_upload,
                Bucket=self._config.bucket_name,
                Key=key,
                UploadId=upload_id,
                MultipartUpload={
                    'Parts': [
                        {'ETag': part.etag, 'PartNumber': part.part_number}
                        for part in parts
                    ]
                },
            )
        except Exception as e:
            logger.error(
                "Failed to complete multipart upload",
                extra={"key": key, "parts": len(parts), "error": str(e)}
            )
            raise StorageError(f"Complete multipart upload failed: {e}")

        # Some S3-compatible stores omit Location
        return response.get('Location') or self._object_url(key)

    async def abort_multipart_upload(self, key: str, upload_id: str) -> None:
        try:
            await asyncio.to_thread(
                self._s3_client.abort_multipart_upload,
                Bucket=self._config.bucket_name,
                Key=key,
                UploadId=upload_id,
            )
        except Exception as e:
            raise StorageError(f"Abort multipart upload failed: {e}")

    async def check_connection(self) -> bool:
        try:
            await asyncio.to_thread(
                self._s3_client.head_bucket,
                Bucket=self._config.bucket_name,
            )
            return True
        except Exception as e:
            logger.warning(
                "Storage connection check failed",
                extra={"bucket": self._config.bucket_name, "error": str(e)}
            )
            return False

    def _object_url(self, key: str) -> str:
        if self._config.endpoint_url:
            return f"{self._config.endpoint_url.rstrip('/')}/{self._config.bucket_name}/{key}"
        return f"https://{self._config.bucket_name}.s3.amazonaws.com/{key}"


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory multipart store for local development and tests.

    Mirrors the S3 contract closely enough to exercise the uploader:
    unknown upload ids are rejected, etags are quoted MD5 digests, and
    completion checks every listed etag against the stored part.
    """

    def __init__(self, bucket_name: str = "mock-bucket") -> None:
        self.bucket_name = bucket_name
        # {upload_id: {"key": str, "content_type": str, "parts": {n: bytes}}}
        self._uploads: dict[str, dict] = {}
        # {key: (content_type, bytes)}
        self._objects: dict[str, tuple[str, bytes]] = {}
        logger.info("Initialized mock storage client (in-memory)")

    async def create_multipart_upload(self, key: str, content_type: str) -> str:
        upload_id = uuid4().hex
        self._uploads[upload_id] = {
            "key": key,
            "content_type": content_type,
            "parts": {},
        }
        return upload_id

    async def upload_part(
        self,
        key: str,
        upload_id: str,
        part_number: int,
        data: bytes,
    ) -> str:
        upload = self._get_upload(key, upload_id)
        upload["parts"][part_number] = bytes(data)

        logger.debug(
            "Stored part in mock storage",
            extra={"key": key, "part_number": part_number, "size_bytes": len(data)}
        )

        return self._etag(data)

    async def complete_multipart_upload(
        self,
        key: str,
        upload_id: str,
        parts: list[PartRecord],
    ) -> str:
        upload = self._get_upload(key, upload_id)

        if not parts:
            raise StorageError("At least one part is required")

        chunks = []
        for part in parts:
            stored = upload["parts"].get(part.part_number)
            if stored is None or self._etag(stored) != part.etag:
                raise StorageError(f"Invalid part: {part.part_number}")
            chunks.append(stored)

        self._objects[key] = (upload["content_type"], b"".join(chunks))
        del self._uploads[upload_id]

        return f"mock://storage/{self.bucket_name}/{key}"

    async def abort_multipart_upload(self, key: str, upload_id: str) -> None:
        self._get_upload(key, upload_id)
        del self._uploads[upload_id]

    async def check_connection(self) -> bool:
        return True

    def get_object(self, key: str) -> bytes:
        """Return a completed object's bytes."""
        if key not in self._objects:
            raise StorageError(f"Object not found: {key}")
        return self._objects[key][1]

    @property
    def pending_uploads(self) -> int:
        """Number of multipart uploads neither completed nor aborted."""
        return len(self._uploads)

    def _get_upload(self, key: str, upload_id: str) -> dict:
        upload = self._uploads.get(upload_id)
        if upload is None or upload["key"] != key:
            raise StorageError(f"No such upload: {upload_id}")
        return upload

    @staticmethod
    def _etag(data: bytes) -> str:
        return f'"{hashlib.md5(data).hexdigest()}"'


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> StorageClient:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return the in-memory client

    Returns:
        StorageClient implementation (S3 or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3StorageClient(config)
