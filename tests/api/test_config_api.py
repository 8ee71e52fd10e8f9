"""API tests for configuration status and upstream verification."""

from httpx import AsyncClient

from taskboard.core.config import get_settings
from tests.fakes import FakePortal


async def test_config_status_configured(client: AsyncClient) -> None:
    response = await client.get("/api/v1/config")

    assert response.status_code == 200
    assert response.json() == {
        "webhookConfigured": True,
        "departmentName": "QA",
        "isConfigured": True,
    }
    assert "test-token" not in response.text


async def test_config_status_unconfigured(client: AsyncClient, monkeypatch) -> None:
    monkeypatch.setenv("UPSTREAM_WEBHOOK_URL", "")
    get_settings.cache_clear()

    data = (await client.get("/api/v1/config")).json()

    assert data["webhookConfigured"] is False
    assert data["isConfigured"] is False


async def test_verify_finds_department(client: AsyncClient, portal: FakePortal) -> None:
    response = await client.get("/api/v1/config/verify")

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "departmentFound": True,
        "departmentId": "7",
        "profileId": "1",
        "errors": {},
    }
    assert portal.methods_called() == ["batch"]


async def test_verify_reports_missing_department(client: AsyncClient, monkeypatch) -> None:
    monkeypatch.setenv("DEPARTMENT_NAME", "Legal")
    get_settings.cache_clear()

    data = (await client.get("/api/v1/config/verify")).json()

    assert data["ok"] is True
    assert data["departmentFound"] is False
    assert data["departmentId"] is None


async def test_verify_reports_sub_request_errors(client: AsyncClient, portal: FakePortal) -> None:
    original = portal.dispatch

    def dispatch(method, params):
        if method == "profile":
            raise LookupError(method)
        return original(method, params)

    portal.dispatch = dispatch

    data = (await client.get("/api/v1/config/verify")).json()

    assert data["ok"] is False
    assert data["errors"] == {"profile": "profile"}
    assert data["profileId"] is None
    assert data["departmentFound"] is True


async def test_verify_requires_configuration(client: AsyncClient, monkeypatch) -> None:
    monkeypatch.setenv("UPSTREAM_WEBHOOK_URL", "ftp://nowhere")
    get_settings.cache_clear()

    response = await client.get("/api/v1/config/verify")

    assert response.status_code == 400
    assert response.json()["error"] == "CONFIGURATION_ERROR"
