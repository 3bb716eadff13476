"""
FastAPI application entry point.

Builds the Buckets app: routers under /Bucket, /System and /health,
optional CORS, HTTPS redirect and forwarded-header middleware, and the
handlers that turn domain errors into 403 and 500 responses.

For local development:
    uvicorn buckets.main:app --reload

For production:
    buckets-server
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from . import __version__
from .api.responses import error_response
from .api.routes import bucket, health, system
from .config.settings import Settings, get_settings
from .core.access.gate import NotAuthorized
from .core.objects.errors import IntegrityError, StorageIoError
from .core.objects.headers import IDENTIFICATION_HEADERS

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Logs the effective configuration on startup and reports problems.
    The storage root is not created here; the store creates it with the
    first object.
    """
    settings: Settings = app.state.settings

    logger.info(
        "Buckets API starting",
        extra={
            "version": __version__,
            "bucket_path": settings.bucket_path,
            "authentication_requirements": settings.authentication_requirements().as_dict(),
        }
    )

    problems = settings.validate_required_fields()
    if problems:
        logger.error(
            "Configuration problems",
            extra={"problems": problems}
        )

    if not Path(settings.bucket_path).is_dir():
        logger.warning(
            "Storage root does not exist yet",
            extra={"bucket_path": settings.bucket_path}
        )

    yield

    # Shutdown
    logger.info("Buckets API shutting down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Pass explicit settings to build an app for a test or an embedded
    server; they replace get_settings for every dependency in the app.
    """
    if settings is None:
        settings = get_settings()

    logging.getLogger("buckets").setLevel(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        description="""
        Minimal object storage service.

        Objects are PUT into named buckets and read back by the id the
        server assigns. A bucket exists while it holds at least one object.

        ## Authentication

        Each operation kind (BucketList, ObjectList, ObjectRead, ObjectCreate,
        ObjectDelete) can independently require an `Authorization: Bearer <token>`
        header. `GET /System/AuthenticationRequirements` reports which do.
        """,
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url="/redoc" if settings.enable_docs else None,
        openapi_url="/openapi.json" if settings.enable_docs else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    if settings.cors_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=list(IDENTIFICATION_HEADERS),
        )

    if settings.use_https_redirection:
        app.add_middleware(HTTPSRedirectMiddleware)

    # Added last so it runs first and the redirect sees the forwarded scheme
    if settings.use_forwarded_headers:
        app.add_middleware(
            ProxyHeadersMiddleware,
            trusted_hosts=settings.forwarded_allow_ips_list,
        )

    # Include routers
    app.include_router(
        bucket.router,
        prefix="/Bucket",
        tags=["Bucket"],
    )

    app.include_router(
        system.router,
        prefix="/System",
        tags=["System"],
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(NotAuthorized)
    async def not_authorized_handler(request: Request, exc: NotAuthorized):
        return error_response(status.HTTP_403_FORBIDDEN, exc.message)

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        """
        Corruption: one of an object's two files is missing or unreadable.

        Never repaired automatically. Full detail stays in the log.
        """
        logger.error(
            "Storage integrity fault",
            extra={
                "path": request.url.path,
                "method": request.method,
                "bucket": exc.bucket,
                "object_id": exc.object_id,
                "error": str(exc),
            },
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)

    @app.exception_handler(StorageIoError)
    async def storage_error_handler(request: Request, exc: StorageIoError):
        logger.error(
            "Storage I/O failure",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients. We log the full
        error server-side but return a generic message.
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

        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": __version__,
        }
    )

    return app


# Create the application instance
# This is what uvicorn imports
app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "buckets.main:app",
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
        # Forwarded headers are handled by the app's own middleware
        proxy_headers=False,
    )


# For debugging/development
if __name__ == "__main__":
    run()
