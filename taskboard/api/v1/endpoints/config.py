"""Configuration status and upstream connectivity check."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from taskboard.api.v1.dependencies import (
    UpstreamConfig,
    get_app_settings,
    get_upstream_client,
    get_upstream_config,
    validate_upstream_config,
)
from taskboard.application.services import find_department, normalize_department
from taskboard.core.config import Settings
from taskboard.core.constants import METHOD_DEPARTMENT_GET, METHOD_PROFILE
from taskboard.core.limiter import limit_verify
from taskboard.domain.exceptions import ConfigurationException
from taskboard.infrastructure.upstream import UpstreamClient, extract_items
from taskboard.schemas.config import ConfigStatusResponse, ConfigVerifyResponse
from taskboard.shared.utils.records import as_str, pick_field

logger = logging.getLogger(__name__)

router = APIRouter()


def _error_text(error: Any) -> str:
    if isinstance(error, dict):
        return str(error.get("error_description") or error.get("error") or error)
    return str(error)


@router.get("", response_model=ConfigStatusResponse)
def get_config_status(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> ConfigStatusResponse:
    """Report whether the upstream endpoint and department are configured."""
    try:
        validate_upstream_config(settings)
        is_configured = True
    except ConfigurationException:
        is_configured = False
    return ConfigStatusResponse(
        webhook_configured=bool(settings.webhook_url),
        department_name=settings.department_name,
        is_configured=is_configured,
    )


@router.get("/verify", response_model=ConfigVerifyResponse)
@limit_verify
async def verify_config(
    request: Request,
    config: Annotated[UpstreamConfig, Depends(get_upstream_config)],
    upstream: Annotated[UpstreamClient, Depends(get_upstream_client)],
) -> ConfigVerifyResponse:
    """Check credentials and department lookup with one batch call."""
    outcome = await upstream.batch(
        {
            "profile": (METHOD_PROFILE, {}),
            "departments": (METHOD_DEPARTMENT_GET, {}),
        }
    )
    profile = outcome.results.get("profile")
    profile_id = as_str(pick_field(profile, "ID", "id")) if isinstance(profile, dict) else None
    departments = [
        normalize_department(r)
        for r in extract_items(outcome.results.get("departments"))
        if isinstance(r, dict)
    ]
    department = find_department(departments, config.department_name)
    errors = {name: _error_text(err) for name, err in outcome.errors.items()}
    if errors:
        logger.warning("Upstream verification reported errors: %s", errors)
    return ConfigVerifyResponse(
        ok=not errors,
        department_found=department is not None,
        department_id=department.id if department else None,
        profile_id=profile_id,
        errors=errors,
    )
