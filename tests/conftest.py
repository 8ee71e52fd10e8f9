"""Pytest configuration and fixtures for taskboard.

Environment is set before taskboard.main is imported so create_app() sees
test settings. API tests talk to the app through ASGITransport; upstream
calls go to a FakePortal through httpx.MockTransport.
"""

import os
from datetime import UTC, datetime

os.environ["UPSTREAM_WEBHOOK_URL"] = "https://portal.example.com/rest/1/test-token/"
os.environ["DEPARTMENT_NAME"] = "QA"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STREAM_CHUNK_DELAY_MS"] = "0"
os.environ["TELEMETRY_ENABLED"] = "false"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from taskboard.api.v1.dependencies import get_cache, get_http_client  # noqa: E402
from taskboard.core.config import get_settings  # noqa: E402
from taskboard.infrastructure.cache import MemoryCacheService  # noqa: E402
from taskboard.main import app  # noqa: E402
from tests.fakes import FakePortal, qa_portal  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings around each test so env overrides take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def portal() -> FakePortal:
    """QA portal dated relative to the real clock (the API uses wall-clock time)."""
    return qa_portal(datetime.now(UTC))


@pytest.fixture
def cache() -> MemoryCacheService:
    return MemoryCacheService(default_ttl=900)


@pytest.fixture
async def client(portal: FakePortal, cache: MemoryCacheService) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI), upstream faked."""
    upstream_http = portal.http_client()
    app.dependency_overrides[get_http_client] = lambda: upstream_http
    app.dependency_overrides[get_cache] = lambda: cache
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
        await upstream_http.aclose()
