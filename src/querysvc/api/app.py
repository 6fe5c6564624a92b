"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import logging
import os
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from querysvc import __version__, errors
from querysvc.adapters.providers import build_service
from querysvc.api.deps import set_service
from querysvc.api.v1.router import router as v1_router
from querysvc.config.settings import Settings
from querysvc.constants import REQUEST_ID_HEADER
from querysvc.core.classifier import classify_error
from querysvc.models.response import ErrorResponse
from querysvc.observability.logging import setup_logging

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "QUERYSVC_CONFIG"
DEFAULT_CONFIG_FILE = "querysvc-config.yaml"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        # QUERYSVC_CONFIG names a YAML file; querysvc-config.yaml is picked up if present
        yaml_path = Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE))
        if yaml_path.exists():
            logger.info("Loading configuration from %s", yaml_path)
            settings = Settings.from_yaml(yaml_path)
        else:
            settings = Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        setup_logging(settings.observability)
        logger.info("Starting querysvc v%s", __version__)

        service, registry = build_service(settings)
        try:
            await registry.initialize_all()
            set_service(service)

            app.state.settings = settings
            app.state.service = service

            logger.info("querysvc is ready to serve requests on port %d", settings.server.port)
            yield
        finally:
            logger.info("Shutting down querysvc...")
            set_service(None)
            await registry.shutdown_all()
            logger.info("querysvc shutdown complete")

    app = FastAPI(
        title="querysvc",
        description=(
            "Query service — authorized resource discovery and organization search "
            "with tamper-evident pagination."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Echo or generate ``X-REQUEST-ID`` and bind it into the log context."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    _register_error_handlers(app)

    # Register API routers
    app.include_router(v1_router)

    return app


def _error_response(err: BaseException | None) -> JSONResponse:
    classified = classify_error(err)
    body = ErrorResponse(name=classified.category.value, message=classified.message)
    return JSONResponse(status_code=classified.status_code, content=body.model_dump())


def _register_error_handlers(app: FastAPI) -> None:
    """Route every failure through the error classifier."""

    @app.exception_handler(errors.QueryError)
    async def query_error_handler(request: Request, exc: errors.QueryError) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in e.get('loc', ())[1:])}: {e.get('msg', 'invalid value')}"
            for e in exc.errors()
        )
        return _error_response(errors.validation(f"invalid request parameters: {details}"))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return _error_response(exc)
