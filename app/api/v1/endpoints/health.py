"""Health check endpoint."""
from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from app.api.models.responses import HealthResponse
from app.api.v1.deps import get_registry, get_settings
from site_audit import __version__
from site_audit.audit.registry import AuditRegistry
from site_audit.config.settings import Settings

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check API health and service status.",
)
async def health_check(
    registry: AuditRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """Return API health status.

    Missing API keys degrade the service: the auditors still run, but the
    performance audit and deep analysis cannot reach their upstream APIs.
    """
    checks = {f"auditor_{key}": True for key in registry.keys()}
    checks["pagespeed_api_key"] = bool(settings.performance.api_key)
    checks["deep_analysis_api_key"] = bool(settings.deep.api_key)

    return HealthResponse(
        status="healthy" if all(checks.values()) else "degraded",
        version=__version__,
        timestamp=datetime.now(UTC),
        checks=checks,
    )
