"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Upstream endpoint and department name are checked per
request (see taskboard.api.v1.dependencies) so a missing value surfaces
as a 400 instead of a failed startup.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings have defaults; range and enum checks run in
    validate_limits_and_backends.
    """

    # App
    app_name: str = "taskboard"
    app_version: str = "1.0.0"
    debug: bool = False

    # Upstream project-management API (incoming webhook URL embeds the token)
    upstream_webhook_url: SecretStr = SecretStr("")
    department_name: str = ""
    include_subdepartments: bool = True
    upstream_timeout_seconds: float = 30.0
    upstream_page_size: int = 50
    upstream_max_items: int = 10_000
    task_list_max_iterations: int = 100
    user_group_size: int = 10
    # 1 keeps group fetches strictly sequential
    upstream_max_concurrency: int = 1
    completed_window_days: int = 30

    # Result cache: "memory" (single process) or "redis"
    cache_backend: str = "memory"
    dashboard_cache_ttl: int = 900

    # Redis Cache
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: SecretStr | None = None

    # Streaming delivery
    stream_chunk_threshold: int = 50_000
    stream_chunk_size: int = 32_000
    stream_chunk_delay_ms: int = 50

    # Rate limiting (SlowAPI)
    rate_limit_enabled: bool = True
    dashboard_rate_limit: str = "30/minute"
    verify_rate_limit: str = "10/minute"

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Request / middleware
    request_timeout_seconds: int = 60
    request_id_header: str = "X-Request-ID"
    correlation_id_header: str = "X-Correlation-ID"

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_limits_and_backends(self) -> "Settings":
        """Validate cache backend and numeric limits."""
        if self.cache_backend not in ("memory", "redis"):
            raise ValueError(
                f"cache_backend must be 'memory' or 'redis', got: {self.cache_backend!r}"
            )
        positive = {
            "upstream_timeout_seconds": self.upstream_timeout_seconds,
            "upstream_page_size": self.upstream_page_size,
            "upstream_max_items": self.upstream_max_items,
            "task_list_max_iterations": self.task_list_max_iterations,
            "user_group_size": self.user_group_size,
            "upstream_max_concurrency": self.upstream_max_concurrency,
            "dashboard_cache_ttl": self.dashboard_cache_ttl,
            "stream_chunk_size": self.stream_chunk_size,
            "stream_chunk_threshold": self.stream_chunk_threshold,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got: {value!r}")
        if self.stream_chunk_delay_ms < 0:
            raise ValueError("stream_chunk_delay_ms must not be negative")
        return self

    @property
    def webhook_url(self) -> str:
        """Plain upstream base URL (empty string when not configured)."""
        return self.upstream_webhook_url.get_secret_value().strip()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
