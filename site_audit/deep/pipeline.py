"""Baseline audits followed by deep analysis, with staged progress."""
from __future__ import annotations

import logging
import uuid

from site_audit.analyze import analyze_website
from site_audit.audit.base import AuditInput
from site_audit.audit.registry import AuditRegistry
from site_audit.config.settings import DeepAnalysisSettings
from site_audit.config.settings import settings as default_settings
from site_audit.deep.agent import DeepAnalyst, nominal_deep_analysis, should_skip_deep_analysis
from site_audit.deep.progress import ProgressReporter, ProgressStage
from site_audit.fetcher.url import normalize_audit_types

logger = logging.getLogger(__name__)


async def run_deep_audit(
    audit_input: AuditInput,
    registry: AuditRegistry,
    analyst: DeepAnalyst,
    reporter: ProgressReporter | None = None,
    settings: DeepAnalysisSettings | None = None,
) -> dict:
    """Run the baseline report, then attach a deep analysis.

    Healthy reports skip the model call. Any exception emits a ``failed``
    stage and propagates.

    Returns:
        Report dict with an extra ``deepAnalysis`` key
    """
    cfg = settings or default_settings.deep
    reporter = reporter or ProgressReporter(uuid.uuid4().hex)
    reporter.emit(ProgressStage.REQUEST_RECEIVED, url=audit_input.url)

    try:
        total = len(normalize_audit_types(audit_input.types, registry.keys()))
        reporter.emit(ProgressStage.BASELINE_STARTED, totalAudits=total)
        report = await analyze_website(
            audit_input,
            registry=registry,
            on_audit_event=reporter.audit_event_handler(total),
        )
        baseline = report.to_dict()
        reporter.emit(ProgressStage.BASELINE_COMPLETED, summary=baseline["summary"])

        if should_skip_deep_analysis(baseline, cfg.skip_min_score):
            deep_analysis = nominal_deep_analysis()
            reporter.emit(ProgressStage.DEEP_ANALYSIS_SKIPPED)
        else:
            reporter.emit(ProgressStage.DEEP_ANALYSIS_STARTED)
            deep_analysis = await reporter.run_with_heartbeat(
                analyst.analyze(baseline), cfg.heartbeat_interval
            )
            reporter.emit(
                ProgressStage.DEEP_ANALYSIS_COMPLETED,
                agentStatus=deep_analysis.get("agent_status"),
            )

        payload = {**baseline, "deepAnalysis": deep_analysis}
        reporter.emit(ProgressStage.RESPONSE_DISPATCHED)
        return payload
    except Exception as exc:
        logger.warning("Deep audit %s failed: %s", reporter.request_id, exc)
        reporter.emit(ProgressStage.FAILED, error=str(exc) or type(exc).__name__)
        raise
