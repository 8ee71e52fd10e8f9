"""Health check endpoint. No dependencies; used for liveness probes."""

from fastapi import APIRouter

from taskboard.core.config import get_settings
from taskboard.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return ok status for liveness."""
    return HealthResponse(version=get_settings().app_version)
