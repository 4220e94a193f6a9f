"""
Application configuration using Pydantic settings.

Bucket, upload limits and storage options come from environment variables.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
