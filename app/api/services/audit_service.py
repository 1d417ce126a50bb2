"""Audit orchestration for the API endpoints."""
from __future__ import annotations

import logging

from app.api.models.requests import AuditRequest
from app.api.services.response_cache import ResponseCache
from site_audit.analyze import analyze_website
from site_audit.audit.registry import AuditRegistry
from site_audit.config.settings import DeepAnalysisSettings
from site_audit.deep.agent import DeepAnalyst
from site_audit.deep.pipeline import run_deep_audit
from site_audit.deep.progress import ProgressReporter

logger = logging.getLogger(__name__)


async def run_single_audit(audit_type: str, body: AuditRequest, registry: AuditRegistry) -> dict:
    """Run one auditor. Never cached."""
    report = await analyze_website(body.to_audit_input(types=[audit_type]), registry=registry)
    return report.to_dict()


async def run_all_audits(body: AuditRequest, registry: AuditRegistry, cache: ResponseCache) -> dict:
    """Run the requested auditors, or all of them, with response caching."""
    audit_input = body.to_audit_input()
    cached = cache.get("all", audit_input.cache_key())
    if cached is not None:
        logger.debug("Cache hit for %s", audit_input.url)
        return cached

    payload = (await analyze_website(audit_input, registry=registry)).to_dict()
    cache.set("all", audit_input.cache_key(), payload)
    return payload


async def run_deep(
    body: AuditRequest,
    registry: AuditRegistry,
    analyst: DeepAnalyst,
    cache: ResponseCache,
    settings: DeepAnalysisSettings,
    reporter: ProgressReporter | None = None,
) -> dict:
    """Baseline report plus deep analysis, with response caching.

    A cache hit skips the pipeline, so no progress stages are emitted for it.
    """
    audit_input = body.to_audit_input()
    cached = cache.get("deep", audit_input.cache_key())
    if cached is not None:
        logger.debug("Cache hit for deep audit of %s", audit_input.url)
        return cached

    payload = await run_deep_audit(
        audit_input, registry, analyst, reporter=reporter, settings=settings
    )
    cache.set("deep", audit_input.cache_key(), payload)
    return payload
