"""API request models."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from site_audit.audit.base import AuditInput


class AuditRequest(BaseModel):
    """Request body shared by every audit endpoint.

    The URL is validated by the audit runner so that malformed URLs map to
    the INVALID_URL error code rather than a schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(
        ...,
        description="The URL to audit",
        examples=["https://example.com"],
    )
    types: list[str] | None = Field(
        default=None,
        description="Audit types to run (perf, seo, security). Omit for all.",
        examples=[["perf", "seo"]],
    )
    timeout_ms: int = Field(
        default=0,
        ge=0,
        alias="timeoutMs",
        description="Per-request timeout in milliseconds, 0 disables it",
    )
    page_speed_api_key: str | None = Field(
        default=None,
        alias="pageSpeedApiKey",
        description="PageSpeed Insights API key for the performance audit",
    )

    @field_validator("types")
    @classmethod
    def strip_types(cls, v: list[str] | None) -> list[str] | None:
        """Trim entries and drop empty ones."""
        if v is None:
            return None
        return [item.strip() for item in v if item.strip()]

    @field_validator("page_speed_api_key")
    @classmethod
    def blank_key_to_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    def to_audit_input(self, types: list[str] | None = None) -> AuditInput:
        """Build the engine input, optionally forcing the audit types."""
        return AuditInput(
            url=self.url,
            timeout_ms=self.timeout_ms,
            types=types if types is not None else self.types,
            page_speed_api_key=self.page_speed_api_key,
        )
