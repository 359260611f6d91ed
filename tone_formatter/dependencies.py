"""Dependency providers for the FastAPI application."""

import httpx
from fastapi import Depends
from starlette.requests import HTTPConnection

from tone_formatter.config import Settings, get_settings
from tone_formatter.services.gateway import ToneRewriteGateway
from tone_formatter.services.rewrite_service import RewriteService
from tone_formatter.services.usage_store import UsageStore


async def get_http_client(connection: HTTPConnection) -> httpx.AsyncClient:
    """Retrieve the shared AsyncClient from application state."""

    return connection.app.state.http_client  # type: ignore[return-value]


async def get_usage_store(connection: HTTPConnection) -> UsageStore:
    """Retrieve the process-wide usage store from application state."""

    return connection.app.state.usage_store  # type: ignore[return-value]


async def get_rewrite_service(
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> RewriteService:
    """Dependency provider for RewriteService."""

    return RewriteService(client=client, settings=settings)


async def get_gateway(
    rewrite_service: RewriteService = Depends(get_rewrite_service),
    usage_store: UsageStore = Depends(get_usage_store),
    settings: Settings = Depends(get_settings),
) -> ToneRewriteGateway:
    """Dependency provider for ToneRewriteGateway."""

    return ToneRewriteGateway(
        rewrite_service=rewrite_service, usage_store=usage_store, settings=settings
    )
