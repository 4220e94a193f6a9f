"""
FastAPI dependency injection.

Dependencies provide the storage client, uploader and configuration to
route handlers. Tests replace them through app.dependency_overrides, so
routes never construct their own clients.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends

from ..config.settings import Settings, get_settings
from ..core.upload.uploader import ChunkedUploader
from ..infrastructure.storage.client import StorageClient, StorageConfig, create_storage_client

logger = logging.getLogger(__name__)

# One storage client per process, shared by all requests
_storage_client: Optional[StorageClient] = None


def get_storage_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> StorageClient:
    """
    Provide the process-wide storage client.

    Created on first use and reused afterwards. boto3 clients are
    thread-safe, so no per-request locking is needed. In mock mode the
    shared instance also keeps uploaded objects around for the lifetime
    of the process.

    An unset bucket still yields a client so the readiness route can
    report the missing setting; calls against it fail with StorageError.
    """
    global _storage_client

    if _storage_client is None:
        if settings.storage_mock_mode:
            _storage_client = create_storage_client(mock_mode=True)
            logger.info("Created shared mock storage client")
        else:
            config = StorageConfig(
                bucket_name=settings.bucket,
                region=settings.aws_region,
                endpoint_url=settings.s3_endpoint_url,
                access_key_id=settings.aws_access_key_id,
                secret_access_key=settings.aws_secret_access_key,
                storage_class=settings.storage_class,
                server_side_encryption=settings.server_side_encryption,
            )
            _storage_client = create_storage_client(config=config)
            logger.info("Created shared S3 storage client")

    return _storage_client


def reset_storage_client() -> None:
    """Drop the shared client so the next request builds a new one."""
    global _storage_client
    _storage_client = None


def get_uploader(
    settings: Annotated[Settings, Depends(get_settings)],
    storage: Annotated[StorageClient, Depends(get_storage_client)],
) -> ChunkedUploader:
    """
    Provide a ChunkedUploader bound to the shared storage client.

    The uploader keeps no per-request state, so building one per request
    is cheap.
    """
    return ChunkedUploader(
        storage=storage,
        chunk_size=settings.upload_chunk_size_bytes,
        max_content_size=settings.max_content_size_bytes,
    )


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
StorageClientDep = Annotated[StorageClient, Depends(get_storage_client)]
ChunkedUploaderDep = Annotated[ChunkedUploader, Depends(get_uploader)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
