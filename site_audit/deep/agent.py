"""LLM-backed remediation plan layered on top of an audit report."""
from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any

from openai import AsyncOpenAI

from site_audit.config.settings import DeepAnalysisSettings
from site_audit.config.settings import settings as default_settings

logger = logging.getLogger(__name__)

SYSTEM_NOMINAL = "SYSTEM_NOMINAL"
CRITICAL_OPTIMIZATION_REQUIRED = "CRITICAL_OPTIMIZATION_REQUIRED"
CONNECTION_LOST = "CONNECTION_LOST"

SYSTEM_PROMPT = """
You are a senior full-stack engineer reviewing website audit telemetry.

Input is a JSON object with the detected tech stack, per-category scores,
raw performance metrics and the ERROR/WARNING findings of the audit.

Pick the single most important failure driving the scores down and write a
fix plan for it. Match fixes to the tech stack (server config for PHP sites,
framework config for Next.js, dashboard settings for CDNs). When the security
score is below 50, fix security first. Only address findings that appear in
the input.

Reply with a JSON object only:
{
  "agent_status": "CRITICAL_OPTIMIZATION_REQUIRED" | "SYSTEM_NOMINAL",
  "summary": "One-paragraph technical summary of the main bottleneck.",
  "steps": [
    {"action": "Fix title", "file": "Target file or dashboard", "code_snippet": "Exact change"}
  ]
}
"""

_CODE_FENCE = re.compile(r"```(?:json)?")


def nominal_deep_analysis() -> dict:
    """Payload used when the baseline report is healthy enough to skip the model."""
    return {
        "agent_status": SYSTEM_NOMINAL,
        "summary": "Core audit results are healthy. Deep analysis skipped for faster response.",
        "steps": [],
    }


def should_skip_deep_analysis(report: dict, min_score: int = 90) -> bool:
    """True when the report scores at least ``min_score`` with no errors."""
    summary = report.get("summary") or {}
    overall = summary.get("overallScore")
    errors = summary.get("errorCount") or 0
    return (
        isinstance(overall, (int, float))
        and not isinstance(overall, bool)
        and overall >= min_score
        and errors == 0
    )


def _audit(modules: list[dict], *keys: str) -> dict:
    return next((m for m in modules if m.get("key") in keys), {})


def detect_tech_stack(report: dict) -> str:
    """Guess the hosting stack from robots.txt and response headers."""
    modules = report.get("audits") or []
    seo = _audit(modules, "seo").get("details") or {}
    sec = _audit(modules, "security").get("details") or {}

    robots = ((seo.get("crawlability") or {}).get("robots") or {}).get("content_snippet") or ""
    headers = sec.get("headers") or {}
    server = headers.get("server") or ""
    powered_by = headers.get("x-powered-by") or ""

    stack = "Generic Web Server"
    if "wp-admin" in robots or "wp-includes" in robots:
        stack = "WordPress / PHP"
    elif "Next.js" in powered_by or "vercel" in (report.get("url") or ""):
        stack = "Next.js / Vercel"

    if "cloudflare" in server.lower():
        stack += " + Cloudflare CDN"
    return stack


def build_context(report: dict) -> dict:
    """Condense a report into the model input."""
    modules = report.get("audits") or []
    perf = _audit(modules, "perf", "performance").get("details") or {}
    seo = _audit(modules, "seo").get("details") or {}
    sec = _audit(modules, "security").get("details") or {}
    metrics = perf.get("metrics") or {}

    critical = [
        f"[{module.get('name')}] {entry.get('message')}"
        for module in modules
        for entry in module.get("logs") or []
        if entry.get("level") in ("ERROR", "WARNING")
    ]

    return {
        "target_url": report.get("url"),
        "tech_stack": detect_tech_stack(report),
        "scores": {
            "performance": perf.get("score") or 0,
            "seo": seo.get("score") or 0,
            "security": sec.get("score") or 0,
        },
        "metrics": {
            "lcp_ms": metrics.get("lcp_ms") or "N/A",
            "inp_ms": metrics.get("inp_ms") or "N/A",
            "cls": metrics.get("cls") or 0,
        },
        "critical_failures": critical,
    }


def _lowest_score(context: dict) -> float:
    # Missing scores count as healthy here
    return min(score or 100 for score in context["scores"].values())


class DeepAnalyst:
    """Asks an OpenAI-compatible chat model for a fix plan.

    Never raises from ``analyze``: model errors and timeouts produce a
    CONNECTION_LOST payload.
    """

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        settings: DeepAnalysisSettings | None = None,
    ):
        self._settings = settings or default_settings.deep
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._settings.api_key or None,
                base_url=self._settings.base_url,
            )
        return self._client

    async def analyze(self, report: dict) -> dict:
        """Return a remediation plan for a report dict."""
        context = build_context(report)
        if not context["critical_failures"] and _lowest_score(context) > 85:
            return {
                "agent_status": SYSTEM_NOMINAL,
                "summary": "All systems operational. No critical issues detected.",
                "steps": [],
            }

        try:
            return await asyncio.wait_for(
                self._complete(context), timeout=self._settings.timeout_seconds
            )
        except Exception as exc:
            logger.error("Deep analysis failed: %s", exc or type(exc).__name__)
            return {
                "agent_status": CONNECTION_LOST,
                "summary": "AI agent unavailable. Falling back to manual heuristics.",
                "steps": [],
            }

    async def _complete(self, context: dict) -> dict[str, Any]:
        completion = await self.client.chat.completions.create(
            model=self._settings.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": json.dumps(context)},
            ],
            response_format={"type": "json_object"},
            temperature=self._settings.temperature,
            max_tokens=self._settings.max_tokens,
        )
        content = completion.choices[0].message.content if completion.choices else None
        return json.loads(_CODE_FENCE.sub("", content or "{}").strip())
