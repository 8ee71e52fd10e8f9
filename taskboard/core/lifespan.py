"""Application lifespan: startup and shutdown.

Wiring of infrastructure only: shared upstream HTTP client, result cache
backend and telemetry. Dependencies fall back to lazily created
instances when the lifespan did not run (e.g. ASGI transport in tests).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from taskboard.core.config import Settings, get_settings
from taskboard.infrastructure.cache import MemoryCacheService, RedisCacheService

logger = logging.getLogger(__name__)


async def create_cache(settings: Settings) -> MemoryCacheService | RedisCacheService:
    """Build (and connect) the configured result cache backend."""
    if settings.cache_backend == "redis":
        cache = RedisCacheService(settings)
        await cache.connect()
        return cache
    return MemoryCacheService(default_ttl=settings.dashboard_cache_ttl)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: telemetry (if enabled), shared HTTP client, cache.
    Shutdown order: HTTP client close, cache disconnect, telemetry shutdown.
    """
    settings = get_settings()

    # ---- Startup ----
    app.state.telemetry = None
    if settings.telemetry_enabled:
        from taskboard.shared.telemetry.telemetry import Telemetry

        app.state.telemetry = Telemetry.from_settings(settings)
        app.state.telemetry.start(app)

    # Shared client for all upstream calls (connection reuse)
    app.state.http_client = httpx.AsyncClient(timeout=settings.upstream_timeout_seconds)
    app.state.cache = await create_cache(settings)
    logger.info("Result cache backend: %s", settings.cache_backend)

    yield

    # ---- Shutdown ----
    if getattr(app.state, "http_client", None) is not None:
        await app.state.http_client.aclose()
        app.state.http_client = None
        logger.info("Upstream HTTP client closed")

    cache = getattr(app.state, "cache", None)
    if isinstance(cache, RedisCacheService):
        await cache.disconnect()
        logger.info("Cache disconnected")
    app.state.cache = None

    if app.state.telemetry is not None:
        app.state.telemetry.shutdown()
        app.state.telemetry = None
