"""Configuration status API schemas (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict, Field


class ConfigStatusResponse(BaseModel):
    """Response for GET /config. Never carries the webhook URL itself."""

    model_config = ConfigDict(populate_by_name=True)

    webhook_configured: bool = Field(..., alias="webhookConfigured")
    department_name: str = Field(..., alias="departmentName")
    is_configured: bool = Field(
        ..., alias="isConfigured", description="Webhook URL and department are both valid"
    )


class ConfigVerifyResponse(BaseModel):
    """Response for GET /config/verify (one batch round trip to the upstream)."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = Field(..., description="All sub-requests succeeded")
    department_found: bool = Field(..., alias="departmentFound")
    department_id: str | None = Field(default=None, alias="departmentId")
    profile_id: str | None = Field(default=None, alias="profileId")
    errors: dict[str, str] = Field(default_factory=dict)
