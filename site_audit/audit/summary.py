"""Cross-auditor summary computation."""
from __future__ import annotations

import math
from collections.abc import Sequence

from site_audit.audit.base import AuditResult, Finding, LogLevel, Summary

TOP_FINDINGS_LIMIT = 5


def _numeric_score(details: object) -> float | None:
    if not isinstance(details, dict):
        return None
    score = details.get("score")
    # bool is an int subclass but never a score
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return None
    if not math.isfinite(score):
        return None
    return float(score)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def summarize(audits: Sequence[AuditResult]) -> Summary:
    """Derive the report summary from settled audit results.

    Pure function of its input. Tolerates missing details, empty logs and
    non-numeric scores.

    Args:
        audits: Settled results, in report order

    Returns:
        Summary with log counts, top findings and the combined score
    """
    counts = {LogLevel.INFO: 0, LogLevel.WARNING: 0, LogLevel.ERROR: 0}
    findings: list[Finding] = []
    scores: list[float] = []

    for audit in audits:
        score = _numeric_score(audit.details)
        if score is not None:
            scores.append(score)

        for entry in audit.logs or []:
            if entry.level in counts:
                counts[entry.level] += 1

            if entry.level in (LogLevel.WARNING, LogLevel.ERROR):
                findings.append(Finding(
                    level=entry.level,
                    audit_key=audit.key,
                    audit_name=audit.name,
                    message=entry.message,
                ))

    # Errors first; sorted() is stable so order within a level is kept
    findings = sorted(findings, key=lambda f: 0 if f.level == LogLevel.ERROR else 1)

    overall_score = None
    if scores:
        overall_score = _round_half_up(sum(scores) / len(scores))

    return Summary(
        total_audits=len(audits),
        info_count=counts[LogLevel.INFO],
        warning_count=counts[LogLevel.WARNING],
        error_count=counts[LogLevel.ERROR],
        overall_score=overall_score,
        top_findings=findings[:TOP_FINDINGS_LIMIT],
    )
