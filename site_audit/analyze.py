"""High-level entry points: default registry and website analysis."""
from __future__ import annotations

import dataclasses

import httpx

from site_audit.audit.base import AuditInput, Report
from site_audit.audit.events import AuditEventSink
from site_audit.audit.registry import AuditRegistry
from site_audit.audit.runner import run_audits
from site_audit.auditors import PerformanceAuditor, SecurityAuditor, SeoAuditor
from site_audit.config.settings import Settings
from site_audit.fetcher.url import normalize_audit_types


def create_default_registry(
    client: httpx.AsyncClient | None = None,
    settings: Settings | None = None,
) -> AuditRegistry:
    """Registry with the perf, seo and security auditors, in that order."""
    registry = AuditRegistry()
    registry.register(PerformanceAuditor(client=client, settings=settings))
    registry.register(SeoAuditor(client=client, settings=settings))
    registry.register(SecurityAuditor(client=client, settings=settings))
    return registry


async def analyze_website(
    audit_input: AuditInput,
    registry: AuditRegistry | None = None,
    client: httpx.AsyncClient | None = None,
    on_audit_event: AuditEventSink | None = None,
) -> Report:
    """Normalize the requested audit types and run them.

    Types may be comma-separated; duplicates are dropped and an empty
    selection means every registered auditor.
    """
    registry = registry or create_default_registry(client=client)
    types = normalize_audit_types(audit_input.types, registry.keys())
    return await run_audits(
        dataclasses.replace(audit_input, types=tuple(types)),
        registry,
        on_audit_event=on_audit_event,
    )
