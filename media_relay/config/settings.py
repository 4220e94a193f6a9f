"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode enables local development without an object store.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Media Relay API"
    api_version: str = "v1"
    port: int = Field(
        default=8080,
        description="Port the server listens on when run directly"
    )

    # S3 Storage Configuration
    bucket: str = Field(
        default="",
        description="Bucket that receives uploaded media"
    )
    aws_region: Optional[str] = Field(
        default=None,
        description="Region of the bucket. Unset uses boto3's default resolution."
    )
    aws_access_key_id: Optional[str] = Field(
        default=None,
        description="Access key ID. Unset uses boto3's default credential chain."
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None,
        description="Secret access key. Unset uses boto3's default credential chain."
    )
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="Endpoint for S3-compatible stores (R2, MinIO). Unset targets AWS."
    )
    storage_class: Optional[str] = Field(
        default=None,
        description="Storage class for new objects, e.g. STANDARD_IA"
    )
    server_side_encryption: Optional[str] = Field(
        default=None,
        description="Server-side encryption for new objects, e.g. AES256 or aws:kms"
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of a real object store."
    )

    # Upload Behavior
    max_content_size_mb: int = Field(
        default=2500,
        ge=1,
        description="Maximum accepted payload in MiB, declared or streamed."
    )
    upload_chunk_size_mb: int = Field(
        default=5,
        ge=5,
        description="Part size in MiB. S3 rejects non-final parts under 5 MiB."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def max_content_size_bytes(self) -> int:
        return self.max_content_size_mb * MIB

    @property
    def upload_chunk_size_bytes(self) -> int:
        return self.upload_chunk_size_mb * MIB

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields. Credentials are not listed:
        boto3 may find them in the environment, shared config or an
        instance role.
        """
        missing = []

        if not self.storage_mock_mode and not self.bucket:
            missing.append("BUCKET")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
