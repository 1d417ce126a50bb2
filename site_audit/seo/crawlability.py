"""robots.txt and sitemap.xml checks."""
from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit

import httpx
from bs4 import BeautifulSoup

from site_audit.audit.errors import RequestTimeoutError
from site_audit.fetcher.http import fetch_with_timeout
from site_audit.fetcher.url import normalize_whitespace, safe_resolve_url

logger = logging.getLogger(__name__)

_SITEMAP_DIRECTIVE = re.compile(r"^\s*Sitemap:\s*(\S+)", re.I | re.M)
_DISALLOW_ROOT = re.compile(r"(^|\n)\s*Disallow:\s*/\s*(#.*)?($|\n)", re.I)

ROBOTS_SNIPPET_LENGTH = 300


def is_blocking_root(robots_txt: str) -> bool:
    """True when robots.txt contains a bare ``Disallow: /`` rule."""
    return bool(_DISALLOW_ROOT.search(robots_txt))


async def audit_crawlability(client: httpx.AsyncClient, base_url: str, timeout_ms: int = 0) -> dict:
    """Fetch robots.txt and the sitemap for the site hosting ``base_url``.

    robots.txt failures count as a missing file. The sitemap URL comes from
    the first ``Sitemap:`` directive, defaulting to /sitemap.xml.
    """
    parts = urlsplit(base_url)
    origin = f"{parts.scheme}://{parts.netloc}"
    robots_url = f"{origin}/robots.txt"
    sitemap_url = f"{origin}/sitemap.xml"

    result = {
        "robots": {"exists": False, "is_blocking_root": False, "content_snippet": ""},
        "sitemap": {"exists": False, "url": sitemap_url, "page_count": 0, "error": None},
    }

    try:
        response = await fetch_with_timeout(client, robots_url, timeout_ms=timeout_ms)
        if response.is_success:
            robots_txt = response.text
            match = _SITEMAP_DIRECTIVE.search(robots_txt)
            if match:
                sitemap_url = safe_resolve_url(match.group(1), robots_url) or sitemap_url
            result["robots"] = {
                "exists": True,
                "is_blocking_root": is_blocking_root(robots_txt),
                "content_snippet": normalize_whitespace(robots_txt)[:ROBOTS_SNIPPET_LENGTH],
            }
    except (httpx.HTTPError, RequestTimeoutError) as exc:
        logger.debug("robots.txt fetch failed for %s: %s", robots_url, exc)

    result["sitemap"]["url"] = sitemap_url

    try:
        response = await fetch_with_timeout(client, sitemap_url, timeout_ms=timeout_ms)
    except (httpx.HTTPError, RequestTimeoutError) as exc:
        logger.debug("sitemap fetch failed for %s: %s", sitemap_url, exc)
        result["sitemap"]["error"] = "Not found"
        return result

    if not response.is_success:
        result["sitemap"]["error"] = f"Sitemap request failed with status {response.status_code}"
        return result

    sitemap = BeautifulSoup(response.content, "xml")
    if sitemap.find() is None:
        result["sitemap"]["error"] = "Invalid XML"
        return result

    result["sitemap"].update({
        "exists": True,
        "page_count": len(sitemap.find_all("loc")),
        "error": None,
    })
    return result
