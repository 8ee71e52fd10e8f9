"""Tests for settings validation and upstream configuration checks."""

import pytest
from pydantic import ValidationError

from taskboard.api.v1.dependencies import validate_upstream_config
from taskboard.core.config import Settings
from taskboard.domain.exceptions import ConfigurationException

VALID_URL = "https://portal.example.com/rest/1/abc123/"


def make_settings(**overrides) -> Settings:
    values = {"upstream_webhook_url": VALID_URL, "department_name": "QA", "_env_file": None}
    values.update(overrides)
    return Settings(**values)


def test_defaults(monkeypatch) -> None:
    for name in ("STREAM_CHUNK_DELAY_MS", "CACHE_BACKEND", "RATE_LIMIT_ENABLED", "TELEMETRY_ENABLED"):
        monkeypatch.delenv(name, raising=False)
    settings = make_settings()
    assert settings.upstream_page_size == 50
    assert settings.user_group_size == 10
    assert settings.upstream_max_concurrency == 1
    assert settings.dashboard_cache_ttl == 900
    assert settings.stream_chunk_threshold == 50_000
    assert settings.stream_chunk_size == 32_000
    assert settings.stream_chunk_delay_ms == 50
    assert settings.include_subdepartments is True


def test_webhook_url_is_secret_but_readable() -> None:
    settings = make_settings(upstream_webhook_url=f"  {VALID_URL}  ")
    assert "abc123" not in repr(settings)
    assert settings.webhook_url == VALID_URL


def test_unknown_cache_backend_rejected() -> None:
    with pytest.raises(ValidationError):
        make_settings(cache_backend="memcached")


@pytest.mark.parametrize(
    "field", ["upstream_page_size", "user_group_size", "upstream_max_concurrency", "dashboard_cache_ttl", "stream_chunk_size"]
)
def test_limits_must_be_positive(field: str) -> None:
    with pytest.raises(ValidationError):
        make_settings(**{field: 0})


def test_negative_chunk_delay_rejected() -> None:
    with pytest.raises(ValidationError):
        make_settings(stream_chunk_delay_ms=-1)


def test_valid_upstream_config() -> None:
    config = validate_upstream_config(make_settings(department_name="  QA  "))
    assert config.webhook_url == VALID_URL
    assert config.department_name == "QA"


@pytest.mark.parametrize(
    "url",
    [
        "https://portal.example.com/rest/1/abc123",
        "https://sub.portal.example.com/rest/42/tok-en_9/",
    ],
)
def test_accepted_webhook_urls(url: str) -> None:
    assert validate_upstream_config(make_settings(upstream_webhook_url=url)).webhook_url == url


@pytest.mark.parametrize(
    "url",
    [
        "",
        "portal.example.com/rest/1/abc",
        "https://portal.example.com/rest/abc/token/",
        "https://portal.example.com/rest/1/",
        "https://portal.example.com/rest/1/token/extra/",
        "http://portal.example.com/rest/1/token/",
    ],
)
def test_rejected_webhook_urls(url: str) -> None:
    with pytest.raises(ConfigurationException) as exc_info:
        validate_upstream_config(make_settings(upstream_webhook_url=url))
    assert exc_info.value.details == {"setting": "upstream_webhook_url"}


def test_plain_http_allowed_in_debug() -> None:
    settings = make_settings(upstream_webhook_url="http://localhost:8000/rest/1/token/", debug=True)
    assert validate_upstream_config(settings).webhook_url.startswith("http://")


def test_blank_department_rejected() -> None:
    with pytest.raises(ConfigurationException) as exc_info:
        validate_upstream_config(make_settings(department_name="   "))
    assert exc_info.value.details == {"setting": "department_name"}
