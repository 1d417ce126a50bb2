"""Concurrent audit runner."""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from datetime import UTC, datetime

from site_audit.audit.base import AuditInput, AuditResult, AuditStatus, BaseAuditor, Report
from site_audit.audit.errors import UnknownAuditTypeError
from site_audit.audit.events import AuditEvent, AuditEventSink, AuditEventType
from site_audit.audit.registry import AuditRegistry
from site_audit.audit.summary import summarize
from site_audit.fetcher.url import assert_valid_url

logger = logging.getLogger(__name__)


def _resolve(registry: AuditRegistry, types: tuple[str, ...] | None) -> list[BaseAuditor]:
    keys = list(types) if types is not None else registry.keys()
    auditors = []
    for key in keys:
        auditor = registry.get(key)
        if auditor is None:
            raise UnknownAuditTypeError(key)
        auditors.append(auditor)
    return auditors


async def _run_guarded(auditor: BaseAuditor, audit_input: AuditInput) -> AuditResult:
    """Run one auditor, turning any exception into a FAIL result."""
    try:
        return await auditor.run(audit_input)
    except Exception as exc:
        message = str(exc) or "Unknown auditor error"
        logger.warning("Auditor %s failed: %s", auditor.key, message)
        return AuditResult.failure(auditor.key, auditor.name, message)


async def run_audits(
    audit_input: AuditInput,
    registry: AuditRegistry,
    on_audit_event: AuditEventSink | None = None,
) -> Report:
    """Run the requested auditors concurrently and assemble a report.

    Args:
        audit_input: Target URL (raw), requested keys and auditor options.
            ``types`` of None selects every registered auditor.
        registry: Registry to resolve keys against
        on_audit_event: Optional synchronous callback for lifecycle events

    Returns:
        Report whose ``audits`` follow the requested order, one per key

    Raises:
        InvalidUrlError: If the URL is not an absolute http/https URL
        UnknownAuditTypeError: If a requested key is not registered

    Both errors are raised before any auditor starts. Auditor failures never
    propagate; they become FAIL results.
    """
    url = assert_valid_url(audit_input.url)
    auditors = _resolve(registry, audit_input.types)
    run_input = dataclasses.replace(audit_input, url=url)

    def emit(event: AuditEvent) -> None:
        if on_audit_event is not None:
            on_audit_event(event)

    async def settle(auditor: BaseAuditor) -> AuditResult:
        result = await _run_guarded(auditor, run_input)
        event_type = (
            AuditEventType.FAILED
            if result.status == AuditStatus.FAIL
            else AuditEventType.COMPLETED
        )
        emit(AuditEvent(event_type, auditor.key, auditor.name, result))
        return result

    logger.info("Running %d audit(s) against %s: %s", len(auditors), url,
                ", ".join(a.key for a in auditors))
    started_at = datetime.now(UTC)

    tasks: list[asyncio.Future[AuditResult]] = []
    try:
        for auditor in auditors:
            emit(AuditEvent(AuditEventType.STARTED, auditor.key, auditor.name))
            tasks.append(asyncio.ensure_future(settle(auditor)))
        audits = list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    finished_at = datetime.now(UTC)
    summary = summarize(audits)
    logger.info(
        "Finished %d audit(s) against %s in %.2fs (score=%s, errors=%d)",
        len(audits), url, (finished_at - started_at).total_seconds(),
        summary.overall_score, summary.error_count,
    )

    return Report(
        url=url,
        started_at=started_at,
        finished_at=finished_at,
        audits=audits,
        summary=summary,
    )
