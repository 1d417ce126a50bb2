"""Unit tests for the performance auditor."""
from __future__ import annotations

import httpx
import pytest

from site_audit.audit.base import AuditInput, AuditStatus, LogLevel
from site_audit.audit.errors import HttpRequestError
from site_audit.auditors.performance import PerformanceAuditor, build_metrics

PSI = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"


def _messages(result, level=None):
    return [e.message for e in result.logs if level is None or e.level == level]


async def _run(mock_http, settings, payload, **input_kwargs):
    client = mock_http({PSI: httpx.Response(200, json=payload)})
    async with client:
        auditor = PerformanceAuditor(client=client, settings=settings)
        result = await auditor.run(AuditInput(url="https://example.com/", **input_kwargs))
    return result, client


class TestGrading:
    """Core Web Vitals grading."""

    @pytest.mark.asyncio
    async def test_good_metrics_pass(self, mock_http, audit_settings, psi_payload):
        result, _ = await _run(mock_http, audit_settings, psi_payload(lcp=1800, inp=150, cls=5))

        assert result.status == AuditStatus.PASS
        assert result.details["score"] == 100
        assert result.details["scoring"] == {"score": 100, "outOf": 100}
        assert _messages(result) == [
            "LCP is within target range",
            "INP is within target range",
            "CLS is within target range",
        ]

    @pytest.mark.asyncio
    async def test_poor_metrics_fail(self, mock_http, audit_settings, psi_payload):
        result, _ = await _run(mock_http, audit_settings, psi_payload(lcp=4000, inp=700, cls=40))

        assert result.status == AuditStatus.FAIL
        assert _messages(result, LogLevel.ERROR) == ["LCP > 2.5s", "INP > 500ms", "CLS > 0.25"]
        assert result.details["score"] == 25
        assert {r["priority"] for r in result.details["recommendations"]} == {"HIGH"}

    @pytest.mark.asyncio
    async def test_needs_improvement_warns(self, mock_http, audit_settings, psi_payload):
        result, _ = await _run(mock_http, audit_settings, psi_payload(lcp=2200, inp=300, cls=15))

        assert result.status == AuditStatus.WARN
        assert _messages(result, LogLevel.WARNING) == [
            "LCP needs improvement",
            "INP needs improvement",
            "CLS needs improvement",
        ]
        assert result.details["score"] == 70

    @pytest.mark.asyncio
    async def test_fid_used_when_inp_missing(self, mock_http, audit_settings, psi_payload):
        result, _ = await _run(mock_http, audit_settings, psi_payload(inp=None, fid=350))

        assert "FID > 300ms" in _messages(result, LogLevel.ERROR)
        metrics = result.details["metrics"]
        assert metrics["fid_ms"] == 350
        assert metrics["interactivity"] == {"metric": "FID", "value_ms": 350}

    @pytest.mark.asyncio
    async def test_missing_metrics_warn(self, mock_http, audit_settings):
        result, _ = await _run(mock_http, audit_settings, {})

        assert result.status == AuditStatus.WARN
        assert _messages(result) == [
            "LCP unavailable from PSI response",
            "INP/FID unavailable from PSI response",
            "CLS unavailable from PSI response",
        ]
        assert result.details["metrics"]["interactivity"]["metric"] == "UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_cls_scaled_from_percentile(self, mock_http, audit_settings, psi_payload):
        result, _ = await _run(mock_http, audit_settings, psi_payload(cls=12))

        assert result.details["metrics"]["cls"] == 0.12


class TestRequest:
    """PageSpeed Insights request construction."""

    @pytest.mark.asyncio
    async def test_input_key_overrides_settings(self, mock_http, audit_settings, psi_payload):
        audit_settings.performance.api_key = "from-settings"
        _, client = await _run(
            mock_http, audit_settings, psi_payload(), page_speed_api_key="from-input"
        )

        params = client.requests[0].url.params
        assert params["key"] == "from-input"
        assert params["url"] == "https://example.com/"
        assert params["strategy"] == "mobile"

    @pytest.mark.asyncio
    async def test_no_key_param_without_key(self, mock_http, audit_settings, psi_payload):
        _, client = await _run(mock_http, audit_settings, psi_payload())

        assert "key" not in client.requests[0].url.params

    @pytest.mark.asyncio
    async def test_upstream_error_raises(self, mock_http, audit_settings):
        client = mock_http({PSI: httpx.Response(429)})
        async with client:
            auditor = PerformanceAuditor(client=client, settings=audit_settings)
            with pytest.raises(HttpRequestError, match="PageSpeed Insights request failed with status 429"):
                await auditor.run(AuditInput(url="https://example.com/"))


class TestBuildMetrics:
    """Tests for the metrics payload shape."""

    def test_inp_preferred(self):
        metrics = build_metrics(1000, 50, 120, 0.01)

        assert "fid_ms" not in metrics
        assert metrics["inp_ms"] == 120
        assert metrics["interactivity"] == {"metric": "INP", "value_ms": 120}
