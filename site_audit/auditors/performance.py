"""Performance auditor backed by the PageSpeed Insights API."""
from __future__ import annotations

from typing import Any

import httpx

from site_audit.audit.base import AuditInput, AuditResult, BaseAuditor, LogEntry, LogLevel
from site_audit.auditors.common import (
    Priority,
    add_recommendation,
    error,
    info,
    scoring,
    warning,
)
from site_audit.config.settings import Settings
from site_audit.config.settings import settings as default_settings
from site_audit.fetcher.http import ensure_ok, fetch_with_timeout, open_client, resolve_timeout_ms


def _percentile(metrics: dict, name: str) -> float | None:
    value = (metrics.get(name) or {}).get("percentile")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def build_metrics(
    lcp_ms: float | None,
    fid_ms: float | None,
    inp_ms: float | None,
    cls: float | None,
) -> dict[str, Any]:
    """Shape the metrics payload, preferring INP over FID for interactivity."""
    if inp_ms is not None:
        interactivity = {"metric": "INP", "value_ms": inp_ms}
    elif fid_ms is not None:
        interactivity = {"metric": "FID", "value_ms": fid_ms}
    else:
        interactivity = {"metric": "UNAVAILABLE", "value_ms": None}

    metrics: dict[str, Any] = {"lcp_ms": lcp_ms}
    if inp_ms is None:
        metrics["fid_ms"] = fid_ms
    metrics["inp_ms"] = inp_ms
    metrics["cls"] = cls
    metrics["interactivity"] = interactivity
    return metrics


class PerformanceAuditor(BaseAuditor):
    """Core Web Vitals audit from PageSpeed Insights field data."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ):
        self._client = client
        self._settings = settings or default_settings

    @property
    def key(self) -> str:
        return "perf"

    @property
    def name(self) -> str:
        return "Performance Auditor"

    @property
    def description(self) -> str:
        return "Checks LCP, INP/FID and CLS field data from PageSpeed Insights"

    async def run(self, audit_input: AuditInput) -> AuditResult:
        """Query PageSpeed Insights and grade the Core Web Vitals."""
        cfg = self._settings.performance
        params = {"url": audit_input.url, "strategy": cfg.strategy}
        api_key = audit_input.page_speed_api_key or cfg.api_key
        if api_key:
            params["key"] = api_key

        fetcher = self._settings.fetcher
        async with open_client(self._client, fetcher) as client:
            response = await fetch_with_timeout(
                client,
                cfg.psi_endpoint,
                timeout_ms=resolve_timeout_ms(audit_input.timeout_ms, fetcher),
                params=params,
            )
            ensure_ok(response, "PageSpeed Insights request")
            payload = response.json()

        metrics = ((payload or {}).get("loadingExperience") or {}).get("metrics") or {}
        lcp_ms = _percentile(metrics, "LARGEST_CONTENTFUL_PAINT_MS")
        fid_ms = _percentile(metrics, "FIRST_INPUT_DELAY_MS")
        inp_ms = _percentile(metrics, "INTERACTION_TO_NEXT_PAINT")
        cls_raw = _percentile(metrics, "CUMULATIVE_LAYOUT_SHIFT_SCORE")
        # PSI reports CLS percentile multiplied by 100
        cls = None if cls_raw is None else round(cls_raw / 100, 3)

        logs: list[LogEntry] = []
        recommendations: list[dict] = []
        self._grade_lcp(lcp_ms, logs, recommendations)
        self._grade_interactivity(inp_ms, fid_ms, logs, recommendations)
        self._grade_cls(cls, logs, recommendations)

        score = self._calculate_score(logs)
        return AuditResult.from_logs(
            self.key,
            self.name,
            logs,
            details={
                "metrics": build_metrics(lcp_ms, fid_ms, inp_ms, cls),
                "score": score,
                "scoring": scoring(score),
                "recommendations": recommendations,
            },
        )

    def _grade_lcp(self, lcp_ms, logs, recommendations) -> None:
        cfg = self._settings.performance
        if lcp_ms is None:
            logs.append(warning("LCP unavailable from PSI response"))
            add_recommendation(
                recommendations, Priority.MEDIUM, "LCP",
                "Measure LCP in production and optimize critical rendering path.",
                "Improves user-perceived load speed.",
            )
        elif lcp_ms > cfg.lcp_poor_ms:
            logs.append(error(f"LCP > {cfg.lcp_poor_ms / 1000:g}s"))
            add_recommendation(
                recommendations, Priority.HIGH, "LCP",
                "Optimize hero image delivery, server response time, and render-blocking resources.",
                "Reduces bounce rate and improves Core Web Vitals compliance.",
            )
        elif lcp_ms > cfg.lcp_needs_improvement_ms:
            logs.append(warning("LCP needs improvement"))
            add_recommendation(
                recommendations, Priority.MEDIUM, "LCP",
                "Preload above-the-fold assets and trim main-thread work during initial render.",
                "Helps reach good LCP threshold.",
            )
        else:
            logs.append(info("LCP is within target range"))

    def _grade_interactivity(self, inp_ms, fid_ms, logs, recommendations) -> None:
        cfg = self._settings.performance
        if inp_ms is None and fid_ms is None:
            logs.append(warning("INP/FID unavailable from PSI response"))
            add_recommendation(
                recommendations, Priority.MEDIUM, "Interactivity",
                "Collect real-user interactivity data and reduce heavy JavaScript handlers.",
                "Improves responsiveness and reduces interaction delays.",
            )
        elif inp_ms is not None:
            if inp_ms > cfg.inp_poor_ms:
                logs.append(error(f"INP > {cfg.inp_poor_ms}ms"))
                add_recommendation(
                    recommendations, Priority.HIGH, "INP",
                    "Break up long tasks, defer non-critical scripts, and optimize event handlers.",
                    "Improves responsiveness and user interaction quality.",
                )
            elif inp_ms > cfg.inp_needs_improvement_ms:
                logs.append(warning("INP needs improvement"))
                add_recommendation(
                    recommendations, Priority.MEDIUM, "INP",
                    "Reduce JavaScript execution and long main-thread tasks.",
                    "Moves interactivity into the good range.",
                )
            else:
                logs.append(info("INP is within target range"))
        elif fid_ms > cfg.fid_poor_ms:
            logs.append(error(f"FID > {cfg.fid_poor_ms}ms"))
            add_recommendation(
                recommendations, Priority.HIGH, "FID",
                "Reduce blocking JavaScript and execution-heavy third-party scripts.",
                "Improves first interaction responsiveness.",
            )
        elif fid_ms > cfg.fid_needs_improvement_ms:
            logs.append(warning("FID needs improvement"))
            add_recommendation(
                recommendations, Priority.MEDIUM, "FID",
                "Trim script execution on first interaction path.",
                "Improves perceived responsiveness.",
            )
        else:
            logs.append(info("FID is within target range"))

    def _grade_cls(self, cls, logs, recommendations) -> None:
        cfg = self._settings.performance
        if cls is None:
            logs.append(warning("CLS unavailable from PSI response"))
            add_recommendation(
                recommendations, Priority.MEDIUM, "CLS",
                "Track layout shifts in production and reserve layout dimensions for dynamic content.",
                "Reduces visual instability.",
            )
        elif cls > cfg.cls_poor:
            logs.append(error(f"CLS > {cfg.cls_poor}"))
            add_recommendation(
                recommendations, Priority.HIGH, "CLS",
                "Set explicit width/height on media and avoid injecting content above existing elements.",
                "Prevents disruptive layout jumps.",
            )
        elif cls > cfg.cls_needs_improvement:
            logs.append(warning("CLS needs improvement"))
            add_recommendation(
                recommendations, Priority.MEDIUM, "CLS",
                "Stabilize layout containers and preload critical fonts.",
                "Improves visual stability toward good threshold.",
            )
        else:
            logs.append(info("CLS is within target range"))

    def _calculate_score(self, logs: list[LogEntry]) -> int:
        cfg = self._settings.performance
        score = 100
        for entry in logs:
            if entry.level == LogLevel.ERROR:
                score -= cfg.error_penalty
            elif entry.level == LogLevel.WARNING:
                score -= cfg.warning_penalty
        return max(0, score)
