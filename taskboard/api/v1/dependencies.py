"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for settings, the shared HTTP client, the
result cache, the upstream client and the dashboard use case. Routes
depend only on these, not on infrastructure directly.

Upstream configuration is validated here, per request, so a missing or
malformed webhook URL or department name becomes a 400 before any
pipeline work starts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Annotated

import httpx
from fastapi import Depends, Request

from taskboard.application.interfaces import ICacheService
from taskboard.application.services import TaskService
from taskboard.application.use_cases import BuildDashboardUseCase
from taskboard.core.config import Settings, get_settings
from taskboard.domain.exceptions import ConfigurationException
from taskboard.infrastructure.cache import MemoryCacheService
from taskboard.infrastructure.upstream import UpstreamClient

# https://<host>/rest/<user id>/<token>/ (trailing slash optional)
_WEBHOOK_PATTERN = re.compile(r"^https://[^/\s]+/rest/\d+/[^/\s]+/?$")
_WEBHOOK_PATTERN_DEBUG = re.compile(r"^https?://[^/\s]+/rest/\d+/[^/\s]+/?$")


@dataclass(frozen=True)
class UpstreamConfig:
    """Validated upstream endpoint and department name."""

    webhook_url: str
    department_name: str


def validate_upstream_config(settings: Settings) -> UpstreamConfig:
    """Return the upstream config or raise ConfigurationException.

    Plain http is accepted only in debug mode.
    """
    url = settings.webhook_url
    if not url:
        raise ConfigurationException(
            "Upstream webhook URL is not configured", setting="upstream_webhook_url"
        )
    pattern = _WEBHOOK_PATTERN_DEBUG if settings.debug else _WEBHOOK_PATTERN
    if not pattern.match(url):
        raise ConfigurationException(
            "Upstream webhook URL must look like https://<host>/rest/<user id>/<token>/",
            setting="upstream_webhook_url",
        )
    department_name = settings.department_name.strip()
    if not department_name:
        raise ConfigurationException(
            "Department name is not configured", setting="department_name"
        )
    return UpstreamConfig(webhook_url=url, department_name=department_name)


def get_app_settings() -> Settings:
    return get_settings()


def get_upstream_config(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UpstreamConfig:
    return validate_upstream_config(settings)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared upstream HTTP client from app state (created on first use if absent)."""
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        client = httpx.AsyncClient(timeout=get_settings().upstream_timeout_seconds)
        request.app.state.http_client = client
    return client


def get_cache(request: Request) -> ICacheService:
    """Result cache from app state (in-memory cache created on first use if absent)."""
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        cache = MemoryCacheService(default_ttl=get_settings().dashboard_cache_ttl)
        request.app.state.cache = cache
    return cache


def get_upstream_client(
    config: Annotated[UpstreamConfig, Depends(get_upstream_config)],
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UpstreamClient:
    return UpstreamClient(
        config.webhook_url,
        http,
        timeout_seconds=settings.upstream_timeout_seconds,
        page_size=settings.upstream_page_size,
        max_items=settings.upstream_max_items,
        max_task_pages=settings.task_list_max_iterations,
    )


def get_dashboard_use_case(
    config: Annotated[UpstreamConfig, Depends(get_upstream_config)],
    upstream: Annotated[UpstreamClient, Depends(get_upstream_client)],
    cache: Annotated[ICacheService, Depends(get_cache)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> BuildDashboardUseCase:
    return BuildDashboardUseCase(
        upstream,
        cache,
        department_name=config.department_name,
        include_subdepartments=settings.include_subdepartments,
        cache_ttl=settings.dashboard_cache_ttl,
        task_service=TaskService(
            upstream,
            group_size=settings.user_group_size,
            max_concurrency=settings.upstream_max_concurrency,
            completed_window_days=settings.completed_window_days,
        ),
    )
