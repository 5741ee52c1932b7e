"""FastAPI application factory for the Wildwatch backend."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from wildwatch import __version__
from wildwatch.errors import (
    ConfigurationError,
    StoreError,
    ValidationError,
    expose_details,
)
from wildwatch.storage import FallbackDataset, PersistenceGateway

from .api import alerts_router, analytics_router, devices_router
from .resources import AlertResource, AnalyticsResource, DeviceResource
from .uploads import PUBLIC_PREFIX, MediaIngestor

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
    "http://localhost:8081",
    "http://127.0.0.1:8081",
)


def cors_origins() -> list[str]:
    """Return the CORS allow list from ``WILDWATCH_CORS_ORIGINS`` or defaults."""

    raw = os.environ.get("WILDWATCH_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or list(DEFAULT_CORS_ORIGINS)


def _error_message(exc: Exception) -> str:
    return str(exc) if expose_details() else "Something went wrong"


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        message = str(error.get("msg", "invalid value"))
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _validation_message(exc)},
        )

    @app.exception_handler(ValidationError)
    async def handle_validation(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)}
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": str(exc)},
        )

    @app.exception_handler(StoreError)
    async def handle_store(request: Request, exc: StoreError) -> JSONResponse:
        logger.error("Store error during %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Store operation failed", "message": _error_message(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            content: dict[str, Any] = {
                "error": "Endpoint not found",
                "path": request.url.path,
                "method": request.method,
            }
        else:
            content = {"error": exc.detail}
        return JSONResponse(
            status_code=exc.status_code, content=content, headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error during %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "message": _error_message(exc)},
        )


def create_app(
    gateway: PersistenceGateway | None = None,
    fallback: FallbackDataset | None = None,
    media: MediaIngestor | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Parameters
    ----------
    gateway:
        Store gateway; built from the environment when omitted.
    fallback:
        In-memory dataset served while the store is unavailable. A fresh,
        seeded dataset is created when omitted.
    media:
        Upload storage; rooted at ``WILDWATCH_UPLOAD_ROOT`` when omitted.

    Returns
    -------
    FastAPI
        Configured app instance.
    """

    gateway = gateway or PersistenceGateway.from_env()
    fallback = fallback or FallbackDataset()
    media = media or MediaIngestor()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if gateway.configured:
            try:
                await gateway.initialize()
            except StoreError:
                logger.exception("Store configured but migrations failed; reads will fall back")
            else:
                logger.info("Store configured")
        else:
            logger.warning("Store not configured - using in-memory data")
        try:
            yield
        finally:
            await gateway.close()

    app = FastAPI(title="Wildwatch API", version=__version__, lifespan=lifespan)
    app.state.gateway = gateway
    app.state.fallback = fallback
    app.state.media = media
    app.state.devices = DeviceResource(gateway, fallback)
    app.state.alerts = AlertResource(gateway, fallback)
    app.state.analytics = AnalyticsResource(gateway, fallback)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Data-Source"],
    )
    _install_error_handlers(app)

    @app.get("/")
    def root() -> dict[str, str]:
        """Return a service banner usable as a health check."""

        return {
            "message": "Wildwatch API is running",
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": __version__,
        }

    app.include_router(devices_router, prefix="/api")
    app.include_router(alerts_router, prefix="/api")
    app.include_router(analytics_router, prefix="/api")

    media.root.mkdir(parents=True, exist_ok=True)
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=media.root), name="uploads")

    return app

