"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

import httpx
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tone_formatter import __version__
from tone_formatter.config import Settings, get_settings
from tone_formatter.exceptions import ErrorCategory
from tone_formatter.logging import configure_logging
from tone_formatter.routes import error_response, router, spa_router
from tone_formatter.services.gateway import MISSING_FIELDS_MESSAGE
from tone_formatter.services.usage_store import JsonFileUsagePersistence, UsageStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create application resources during startup and clean up on shutdown."""

    settings: Settings = app.state.settings
    usage_store = UsageStore(JsonFileUsagePersistence(settings.usage_stats_file))
    total_calls = usage_store.load()
    logger.info(
        "Tone formatter starting",
        extra={
            "environment": settings.environment,
            "port": settings.port,
            "total_calls": total_calls,
            "api_key_configured": settings.has_api_key,
        },
    )

    async with httpx.AsyncClient() as client:
        app.state.http_client = client
        app.state.usage_store = usage_store
        yield
        del app.state.http_client


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory."""

    explicit_settings = settings is not None
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Tone Formatter",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    if explicit_settings:
        app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Error-Category"],
    )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "Request handled",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        return response

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Error details may echo the submitted text, so only the locations are logged.
        logger.info(
            "Malformed request body",
            extra={"path": request.url.path, "locations": [err.get("loc") for err in exc.errors()]},
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST, MISSING_FIELDS_MESSAGE, ErrorCategory.VALIDATION
        )

    app.include_router(router)
    app.include_router(router, prefix="/api", include_in_schema=False)
    # Registered last so the API routes take precedence over the SPA fallback.
    app.include_router(spa_router)

    return app


def run() -> None:
    """Serve the application with uvicorn."""

    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "tone_formatter.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )
