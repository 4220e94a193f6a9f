"""
FastAPI application entry point.

This module creates and configures the FastAPI application through an
application factory (create_app), so tests can build fresh instances.

For local development:
    uvicorn media_relay.main:app --reload --port 8080

For production:
    gunicorn media_relay.main:app -w 4 -k uvicorn.workers.UvicornWorker -b 0.0.0.0:8080
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.routes import files, health
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Logs startup configuration and reports missing settings. The storage
    client itself is created lazily on the first request that needs it.
    """
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info(
        "Media Relay API starting",
        extra={
            "version": __version__,
            "bucket": settings.bucket,
            "mock_mode": settings.storage_mock_mode,
            "max_content_size_mb": settings.max_content_size_mb,
            "chunk_size_mb": settings.upload_chunk_size_mb,
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("Media Relay API shutting down")


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        description="""
        Streams image and video uploads into object storage.

        ## Upload

        `POST /api/v1/file` with the raw file as the request body and an
        `image/*` or `video/*` Content-Type. The body is relayed to the
        bucket in 5 MiB parts, so files of any size up to the configured
        maximum are accepted without buffering them in memory.

        Returns `201` with `{"key": ..., "links": [{"url": ...}]}`.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        files.router,
        prefix=f"/api/{settings.api_version}/file",
        tags=["Files"],
    )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients. The full error is
        logged server-side; the client only gets a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": __version__,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "media_relay.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
