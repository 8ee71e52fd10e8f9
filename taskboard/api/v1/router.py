"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. Routes
use dependencies from taskboard.api.v1.dependencies.
"""

from fastapi import APIRouter

from taskboard.api.v1.endpoints import config, dashboard, health

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(config.router, prefix="/config", tags=["config"])
