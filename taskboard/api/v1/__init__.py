"""API v1: dashboard, configuration and health routes."""

from taskboard.api.v1.router import api_router

__all__ = ["api_router"]
