"""Unit tests for the SEO auditor."""
from __future__ import annotations

import httpx
import pytest
from bs4 import BeautifulSoup

from site_audit.audit.base import AuditInput, AuditStatus, LogLevel
from site_audit.audit.errors import HttpRequestError
from site_audit.auditors.seo import SeoAuditor, calculate_score, count_images_without_alt, inspect_json_ld

URL = "https://example.com/"
ROBOTS = "https://example.com/robots.txt"
SITEMAP = "https://example.com/sitemap.xml"


def _messages(result, level=None):
    return [e.message for e in result.logs if level is None or e.level == level]


async def _run(mock_http, settings, routes):
    client = mock_http(routes)
    async with client:
        return await SeoAuditor(client=client, settings=settings).run(AuditInput(url=URL))


class TestSeoAuditor:
    """End-to-end checks of the SEO auditor against mocked pages."""

    @pytest.mark.asyncio
    async def test_healthy_page_passes(
        self, mock_http, audit_settings, seo_friendly_html, robots_txt_allow_all, sitemap_xml
    ):
        result = await _run(mock_http, audit_settings, {
            URL: httpx.Response(200, text=seo_friendly_html),
            ROBOTS: httpx.Response(200, text=robots_txt_allow_all),
            SITEMAP: httpx.Response(200, text=sitemap_xml),
        })

        assert result.status == AuditStatus.PASS
        assert _messages(result) == ["No major SEO issues detected"]
        details = result.details
        assert details["score"] == 100
        assert details["scoring"] == {"score": 100, "outOf": 100}
        assert details["title"] == "Performance Budgets Guide"
        assert details["canonical_url"] == "https://example.com/guide"
        assert details["json_ld"] == {"count": 1, "invalid_count": 0}
        assert details["content"]["word_count"] >= 300
        assert details["link_health"] is None
        assert details["crawlability"]["sitemap"]["page_count"] == 2

    @pytest.mark.asyncio
    async def test_poor_page_fails(self, mock_http, audit_settings, minimal_html, robots_txt_block_all):
        result = await _run(mock_http, audit_settings, {
            URL: httpx.Response(200, text=minimal_html),
            ROBOTS: httpx.Response(200, text=robots_txt_block_all),
        })

        assert result.status == AuditStatus.FAIL
        assert _messages(result, LogLevel.ERROR) == ["robots.txt blocks the entire site (Disallow: /)"]
        warnings = _messages(result, LogLevel.WARNING)
        assert "Missing meta description" in warnings
        assert "Missing meta viewport" in warnings
        assert "Missing link rel=canonical" in warnings
        assert "No H1 heading found" in warnings
        assert "No JSON-LD schema found" in warnings
        assert "Thin content (1 words)" in warnings
        assert "Missing Open Graph tag: og:image" in warnings
        assert "XML sitemap not found" in warnings
        assert any(m.startswith("Missing social tags:") for m in _messages(result, LogLevel.INFO))
        assert result.details["score"] == 29

    @pytest.mark.asyncio
    async def test_markup_issues(self, mock_http, audit_settings):
        html = """<html><head>
            <script type="application/ld+json">{not json</script>
        </head><body>
            <h1>One</h1><h1>Two</h1>
            <center>Old</center>
            <img src="a.png"><img src="b.png" alt=" "><img src="c.png" alt="ok">
        </body></html>"""

        result = await _run(mock_http, audit_settings, {URL: httpx.Response(200, text=html)})

        assert "Invalid JSON-LD detected" in _messages(result, LogLevel.ERROR)
        warnings = _messages(result, LogLevel.WARNING)
        assert "Multiple H1 headings found (2)" in warnings
        assert "Legacy DOM detected" in warnings
        assert "2 image(s) missing alt attribute" in warnings
        assert "No JSON-LD schema found" not in warnings
        assert result.details["legacy_dom_tags"] == ["center"]
        assert result.details["images"] == {"total": 3, "without_alt": 2}

    @pytest.mark.asyncio
    async def test_broken_internal_link(
        self, mock_http, audit_settings, seo_friendly_html, robots_txt_allow_all, sitemap_xml
    ):
        audit_settings.seo.check_links = True
        result = await _run(mock_http, audit_settings, {
            URL: httpx.Response(200, text=seo_friendly_html),
            ROBOTS: httpx.Response(200, text=robots_txt_allow_all),
            SITEMAP: httpx.Response(200, text=sitemap_xml),
        })

        assert result.status == AuditStatus.FAIL
        assert _messages(result, LogLevel.ERROR) == ["1 broken internal link(s)"]
        assert result.details["link_health"]["dead_links"][0]["url"] == "https://example.com/pricing"
        assert result.details["score"] == 95

    @pytest.mark.asyncio
    async def test_page_error_raises(self, mock_http, audit_settings):
        with pytest.raises(HttpRequestError, match="SEO fetch failed with status 500"):
            await _run(mock_http, audit_settings, {URL: httpx.Response(500)})


class TestScoringHelpers:
    """Tests for SEO scoring helpers."""

    def test_calculate_score_caps(self, audit_settings):
        findings = {
            "missing_meta_tags": [],
            "missing_link_rels": [],
            "has_missing_h1": False,
            "has_multiple_h1": False,
            "invalid_json_ld_count": 0,
            "is_thin_content": False,
            "without_alt": 50,
            "legacy_tags_count": 0,
            "internal_broken_count": 10,
            "external_broken_count": 10,
            "has_missing_og_image": False,
            "has_blocking_root_robots": False,
            "has_missing_sitemap": False,
        }

        # alt capped at 10 images (20 points), links at 20 and 10 points
        assert calculate_score(findings, audit_settings.seo) == 50

    def test_score_floor(self, audit_settings):
        findings = {
            "missing_meta_tags": ["description", "viewport"],
            "missing_link_rels": ["canonical"],
            "has_missing_h1": True,
            "has_multiple_h1": False,
            "invalid_json_ld_count": 3,
            "is_thin_content": True,
            "without_alt": 0,
            "legacy_tags_count": 0,
            "internal_broken_count": 0,
            "external_broken_count": 0,
            "has_missing_og_image": True,
            "has_blocking_root_robots": True,
            "has_missing_sitemap": True,
        }

        assert calculate_score(findings, audit_settings.seo) == 0

    def test_inspect_helpers(self):
        soup = BeautifulSoup(
            '<script type="application/ld+json">{"a": 1}</script><img src="x"><img alt="y">',
            "lxml",
        )

        assert inspect_json_ld(soup) == {"count": 1, "invalid_count": 0}
        assert count_images_without_alt(soup) == 1
