"""HTTP routes: format relay, usage statistics and health."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse, JSONResponse

from tone_formatter.config import Settings, get_settings
from tone_formatter.dependencies import get_gateway, get_usage_store
from tone_formatter.exceptions import (
    ConfigError,
    ErrorCategory,
    UpstreamError,
    ValidationError,
)
from tone_formatter.models import (
    ErrorResponse,
    FormatRequest,
    FormatResponse,
    HealthResponse,
    UsageResponse,
)
from tone_formatter.services.gateway import ToneRewriteGateway
from tone_formatter.services.usage_store import UsageStore

logger = logging.getLogger(__name__)

ERROR_CATEGORY_HEADER = "X-Error-Category"
CONFIG_ERROR_MESSAGE = "API configuration error. Please check server setup."
UPSTREAM_ERROR_MESSAGE = "External API error. Please try again later."
INTERNAL_ERROR_MESSAGE = "Internal server error. Please try again later."
GROWING_USAGE_MESSAGE = "🚀 Growing usage!"
NEW_PROJECT_MESSAGE = "✨ New project!"


class AsciiJSONResponse(JSONResponse):
    """JSON response with non-ASCII characters escaped.

    Text submitted by browsers may hold unpaired surrogates, which cannot be
    encoded as UTF-8 but round-trip as ``\\uXXXX`` escapes.
    """

    def render(self, content: Any) -> bytes:
        return json.dumps(content, allow_nan=False, separators=(",", ":")).encode("ascii")


router = APIRouter()
spa_router = APIRouter()


@router.post(
    "/format",
    response_model=FormatResponse,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def format_text(
    payload: FormatRequest,
    gateway: Annotated[ToneRewriteGateway, Depends(get_gateway)],
) -> JSONResponse:
    """Rewrite the submitted text in the requested tone."""

    try:
        result = await gateway.format(payload)
        return AsciiJSONResponse(result.model_dump(by_alias=True))
    except ValidationError as exc:
        logger.info("Format request rejected", extra={"category": exc.category.value})
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.category)
    except ConfigError as exc:
        logger.error("Format request failed: configuration", extra={"category": exc.category.value})
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, CONFIG_ERROR_MESSAGE, exc.category
        )
    except UpstreamError as exc:
        logger.error(
            "Format request failed: upstream",
            extra={"category": exc.category.value, "status_code": exc.status_code},
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, UPSTREAM_ERROR_MESSAGE, exc.category
        )
    except Exception:
        logger.exception("Format request failed: internal")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE, ErrorCategory.UNKNOWN
        )


@router.get("/usage", response_model=UsageResponse, response_model_by_alias=True)
async def usage(usage_store: Annotated[UsageStore, Depends(get_usage_store)]) -> UsageResponse:
    total = usage_store.read()
    message = GROWING_USAGE_MESSAGE if total > 0 else NEW_PROJECT_MESSAGE
    return UsageResponse(total_usage=total, message=message)


@router.get("/health", response_model=HealthResponse)
async def health(settings: Annotated[Settings, Depends(get_settings)]) -> HealthResponse:
    return HealthResponse(status="ok", timestamp=utc_timestamp(), env=settings.environment)


@spa_router.get("/{_full_path:path}", include_in_schema=False, response_model=None)
async def serve_spa(
    _full_path: str, settings: Annotated[Settings, Depends(get_settings)]
) -> FileResponse | JSONResponse:
    """Serve the static client for any unmatched path."""

    index_path = settings.static_dir / "index.html"
    if index_path.is_file():
        return FileResponse(index_path, media_type="text/html")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "Frontend not available"},
    )


def error_response(status_code: int, message: str, category: ErrorCategory) -> JSONResponse:
    """Structured ``{"error": ...}`` body with the category tag in a header."""

    return AsciiJSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers={ERROR_CATEGORY_HEADER: category.value},
    )


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""

    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
