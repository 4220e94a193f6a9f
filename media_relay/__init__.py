"""
Media Relay - streams image and video uploads into object storage.

This package contains the complete application:
- core: Framework-agnostic upload orchestration
- infrastructure: Object storage integration
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
