"""FastAPI application entry point.

Wiring only: logging, lifespan, exception handlers, middleware, routers.
See taskboard.core.lifespan and taskboard.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and
clear the get_settings cache) before calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from taskboard.api.v1 import api_router
from taskboard.core.config import get_settings
from taskboard.core.exception_handlers import register_exception_handlers
from taskboard.core.lifespan import create_lifespan
from taskboard.core.limiter import limiter
from taskboard.middleware import (
    CorrelationIDMiddleware,
    RequestIDMiddleware,
    TimeoutMiddleware,
)
from taskboard.shared.telemetry.logging import setup_logging

API_PREFIX = "/api/v1"
DASHBOARD_PATH = f"{API_PREFIX}/dashboard/tasks"
STREAM_PATH = f"{DASHBOARD_PATH}/stream"


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # Middleware: last added = outermost. Order: timeout → request ID → correlation ID → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(
        CorrelationIDMiddleware,
        header_name=settings.correlation_id_header,
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)
    app.add_middleware(
        TimeoutMiddleware,
        timeout_seconds=settings.request_timeout_seconds,
        exempt_paths=(DASHBOARD_PATH, STREAM_PATH),
    )

    app.include_router(api_router, prefix=API_PREFIX)
    return app


app = create_app()
