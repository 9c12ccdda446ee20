#!/usr/bin/env python3
"""
FastAPI Application Entry Point

Configures the watermark service: lifespan (service container), request-id
middleware, exception handlers and routers.

Run with:
    python -m watermark_service.application.app
    uvicorn watermark_service.application.app:app
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from watermark_service.application.api.routes import health_router, images_router, metrics_router
from watermark_service.application.container import ServiceContainer, build_container
from watermark_service.config.constants import HEADER_REQUEST_ID, Stage
from watermark_service.config.settings import Settings, get_settings
from watermark_service.core.exceptions import (
    BlobNotFoundError,
    BlobUnavailableError,
    CacheError,
    ImageDecodeError,
    TransformError,
    WatermarkServiceError,
)
from watermark_service.core.logging.logger import (
    clear_request_id,
    get_logger,
    get_request_id,
    set_request_id,
    setup_logging,
)

logger = get_logger(__name__)

# Most specific first; the first isinstance match wins
ERROR_STATUS_CODES: list[tuple[type[WatermarkServiceError], int]] = [
    (BlobNotFoundError, status.HTTP_404_NOT_FOUND),
    (BlobUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ImageDecodeError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (TransformError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (CacheError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_code_for(exc: WatermarkServiceError) -> int:
    """HTTP status for a domain exception (500 when unmapped)."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


# ============================================================================
# Application Lifespan
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).

    Builds the service container unless one was injected through
    ``create_app(container=...)``. Only a container built here is closed here.
    """
    settings: Settings = app.state.settings

    setup_logging(
        log_level=settings.logging.LOG_LEVEL,
        log_format=settings.logging.LOG_FORMAT
    )

    logger.info(
        "Starting watermark service",
        stage=Stage.STARTUP,
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
        cache_provider=settings.cache.CACHE_PROVIDER,
        storage_provider=settings.storage.STORAGE_PROVIDER,
    )

    owns_container = getattr(app.state, "container", None) is None
    if owns_container:
        app.state.container = build_container(settings)

    logger.info("Application startup complete", stage=Stage.STARTUP)

    try:
        yield
    finally:
        logger.info("Shutting down application")
        if owns_container:
            await app.state.container.close()
            app.state.container = None
        logger.info("Application shutdown complete")


# ============================================================================
# Application Factory
# ============================================================================

def create_app(settings: Settings | None = None, container: ServiceContainer | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to build from (defaults to the global settings)
        container: Prebuilt service container, used as-is (tests)

    Returns:
        FastAPI: Configured application instance
    """
    if settings is None:
        settings = container.settings if container is not None else get_settings()

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Cache-aside watermarking service for package photos",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.settings = settings
    app.state.container = container

    # Images under the versioned base path; health checks and metrics at the root
    app.include_router(images_router, prefix=settings.app.API_BASE_PATH)
    app.include_router(health_router)
    app.include_router(metrics_router)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Read or create X-Request-ID, bind it to logs and echo it back."""
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        set_request_id(request_id)

        try:
            response = await call_next(request)
            response.headers[HEADER_REQUEST_ID] = request_id
            return response
        finally:
            clear_request_id()

    @app.exception_handler(WatermarkServiceError)
    async def watermark_exception_handler(request: Request, exc: WatermarkServiceError):
        """Map domain exceptions to JSON error responses."""
        if exc.request_id is None:
            exc.request_id = get_request_id()

        status_code = status_code_for(exc)
        log = logger.error if status_code >= 500 else logger.warning
        log(
            f"Request failed: {exc.message}",
            error_type=type(exc).__name__,
            status_code=status_code,
            path=request.url.path,
        )

        return JSONResponse(
            status_code=status_code,
            content=exc.to_dict(),
            headers={HEADER_REQUEST_ID: exc.request_id or ""}
        )

    return app


# Create application instance
app = create_app()


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "watermark_service.application.app:app",
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_level=settings.logging.LOG_LEVEL.lower()
    )
