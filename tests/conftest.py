"""Shared test fixtures and configuration."""
from __future__ import annotations

import asyncio
from collections.abc import Callable
from urllib.parse import urlsplit

import httpx
import pytest

from site_audit.audit.base import AuditInput, AuditResult, BaseAuditor, LogEntry, LogLevel
from site_audit.audit.registry import AuditRegistry
from site_audit.config.settings import Settings


class StubAuditor(BaseAuditor):
    """Configurable auditor for engine tests."""

    def __init__(
        self,
        key: str,
        name: str | None = None,
        logs: list[LogEntry] | None = None,
        details: dict | None = None,
        error: Exception | None = None,
        delay: float = 0,
        gate: asyncio.Event | None = None,
        trace: list[str] | None = None,
    ):
        self._key = key
        self._name = name or f"{key.title()} Auditor"
        self._logs = logs if logs is not None else [LogEntry(LogLevel.INFO, f"{key} ok")]
        self._details = details if details is not None else {}
        self._error = error
        self._delay = delay
        self._gate = gate
        self._trace = trace
        self.calls: list[AuditInput] = []

    @property
    def key(self) -> str:
        return self._key

    @property
    def name(self) -> str:
        return self._name

    async def run(self, audit_input: AuditInput) -> AuditResult:
        self.calls.append(audit_input)
        if self._trace is not None:
            self._trace.append(f"{self.key}:start")
        if self._gate is not None:
            await self._gate.wait()
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._trace is not None:
            self._trace.append(f"{self.key}:end")
        if self._error is not None:
            raise self._error
        return AuditResult.from_logs(self.key, self.name, self._logs, details=dict(self._details))


@pytest.fixture
def make_auditor() -> Callable[..., StubAuditor]:
    """Return a factory for stub auditors."""
    return StubAuditor


@pytest.fixture
def make_registry() -> Callable[..., AuditRegistry]:
    """Return a factory building a registry from auditors."""

    def build(*auditors: BaseAuditor) -> AuditRegistry:
        registry = AuditRegistry()
        for auditor in auditors:
            registry.register(auditor)
        return registry

    return build


@pytest.fixture
def mock_url() -> str:
    """Return a mock URL for testing."""
    return "https://example.com/test-page"


@pytest.fixture
def audit_settings(monkeypatch) -> Settings:
    """Settings isolated from the environment, with link checks off."""
    for name in (
        "PAGESPEEDINSIGHTS_API_KEY",
        "GROQ_API_KEY",
        "SITE_AUDIT_CHECK_LINKS",
        "AUDIT_CACHE_TTL_MS",
        "SITE_AUDIT_TIMEOUT_MS",
    ):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    settings.seo.check_links = False
    return settings


def _route_key(url: httpx.URL | str) -> str:
    parts = urlsplit(str(url))
    return f"{parts.scheme}://{parts.netloc}{parts.path or '/'}"


@pytest.fixture
def mock_http() -> Callable[..., httpx.AsyncClient]:
    """Return a factory for httpx clients backed by a route table.

    Routes map ``scheme://host/path`` (query ignored) to an httpx.Response,
    a callable taking the request, or an exception instance to raise.
    Unknown routes answer 404. Every request is recorded on ``client.requests``.
    """

    def build(routes: dict[str, object]) -> httpx.AsyncClient:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            target = routes.get(_route_key(request.url))
            if target is None:
                return httpx.Response(404, text="Not Found")
            if isinstance(target, Exception):
                raise target
            if callable(target):
                return target(request)
            return target

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client.requests = seen  # type: ignore[attr-defined]
        return client

    return build


@pytest.fixture
def psi_payload() -> Callable[..., dict]:
    """Return a factory for PageSpeed Insights payloads."""

    def build(lcp=1800, inp=150, fid=None, cls=5) -> dict:
        metrics = {}
        if lcp is not None:
            metrics["LARGEST_CONTENTFUL_PAINT_MS"] = {"percentile": lcp}
        if inp is not None:
            metrics["INTERACTION_TO_NEXT_PAINT"] = {"percentile": inp}
        if fid is not None:
            metrics["FIRST_INPUT_DELAY_MS"] = {"percentile": fid}
        if cls is not None:
            metrics["CUMULATIVE_LAYOUT_SHIFT_SCORE"] = {"percentile": cls}
        return {"loadingExperience": {"metrics": metrics}}

    return build


SECURE_HEADERS = {
    "content-security-policy": "default-src 'self'",
    "x-frame-options": "DENY",
    "x-content-type-options": "nosniff",
}


@pytest.fixture
def secure_headers() -> dict[str, str]:
    return dict(SECURE_HEADERS)


@pytest.fixture
def seo_friendly_html() -> str:
    """Return a page that passes every SEO check."""
    paragraph = (
        "Web performance budgets help teams keep pages fast as features grow. "
        "Measuring real user metrics shows where the budget is spent and which "
        "assets delay rendering on slow mobile networks. "
    )
    body = "\n".join(f"<p>{paragraph}</p>" for _ in range(12))
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>Performance Budgets Guide</title>
    <meta name="description" content="How to set and enforce web performance budgets.">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <link rel="canonical" href="https://example.com/guide">
    <meta property="og:title" content="Performance Budgets Guide">
    <meta property="og:description" content="How to set web performance budgets.">
    <meta property="og:image" content="https://example.com/cover.png">
    <meta property="og:url" content="https://example.com/guide">
    <meta name="twitter:card" content="summary_large_image">
    <meta name="twitter:title" content="Performance Budgets Guide">
    <meta name="twitter:description" content="How to set web performance budgets.">
    <script type="application/ld+json">{{"@context": "https://schema.org", "@type": "Article"}}</script>
</head>
<body>
    <h1>Performance Budgets Guide</h1>
    {body}
    <img src="/chart.png" alt="Budget chart">
    <a href="/pricing">Pricing</a>
</body>
</html>"""


@pytest.fixture
def minimal_html() -> str:
    """Return minimal HTML for edge case testing."""
    return """<!DOCTYPE html>
<html>
<head><title>Minimal</title></head>
<body><p>Content</p></body>
</html>"""


@pytest.fixture
def robots_txt_allow_all() -> str:
    return """User-agent: *
Allow: /

Sitemap: https://example.com/sitemap.xml
"""


@pytest.fixture
def robots_txt_block_all() -> str:
    return """User-agent: *
Disallow: /
"""


@pytest.fixture
def sitemap_xml() -> str:
    return """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/</loc></url>
  <url><loc>https://example.com/guide</loc></url>
</urlset>"""
