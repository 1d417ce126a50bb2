"""Link inventory and link health checks."""
from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from urllib.parse import urldefrag, urlsplit

import httpx
from bs4 import BeautifulSoup

from site_audit.audit.errors import RequestTimeoutError
from site_audit.config.settings import SeoSettings
from site_audit.fetcher.http import fetch_with_timeout
from site_audit.fetcher.url import is_http_url, normalize_whitespace, safe_resolve_url

logger = logging.getLogger(__name__)

BROKEN_STATUS_MIN = 400
BROKEN_STATUS_MAX = 599
HEAD_FALLBACK_STATUS = 405
REDIRECT_STATUS_CODES = frozenset({301, 302, 303, 307, 308})
BOT_BLOCKER_STATUS_CODES = frozenset({400, 403, 429, 999})

_SSL_PATTERN = re.compile(r"SSL|TLS|certificate|self signed|UNABLE_TO_VERIFY_LEAF_SIGNATURE", re.I)


def analyze_links(soup: BeautifulSoup, base_url: str) -> dict:
    """Split anchors into internal and external http(s) links.

    Fragments are stripped and duplicates dropped, keeping first-seen order.
    """
    internal: dict[str, None] = {}
    external: dict[str, None] = {}
    ignored: list[str] = []
    unresolved: list[str] = []
    base_host = urlsplit(base_url).hostname if is_http_url(base_url) else None

    anchors = soup.find_all("a")
    for node in anchors:
        href = normalize_whitespace(node.get("href"))
        if not href:
            continue

        resolved = safe_resolve_url(href, base_url)
        if not resolved:
            unresolved.append(href)
            continue
        if not is_http_url(resolved):
            ignored.append(href)
            continue

        url, _ = urldefrag(resolved)
        if base_host and urlsplit(url).hostname == base_host:
            internal[url] = None
        else:
            external[url] = None

    return {
        "total": len(anchors),
        "internal_count": len(internal),
        "external_count": len(external),
        "internal": list(internal),
        "external": list(external),
        "unresolved_count": len(unresolved),
        "unresolved": unresolved,
        "ignored_count": len(ignored),
    }


@dataclass
class LinkCheck:
    """Outcome of checking one link."""
    url: str
    link_type: str
    priority: str
    status_code: int | str | None = None
    checked_with: str = "HEAD"
    used_fallback: bool = False
    is_broken: bool = False
    is_rate_limited: bool = False
    is_redirect: bool = False
    location: str | None = None
    error: str | None = None
    warning: str | None = None


def is_broken_status(status_code: int) -> bool:
    if status_code == 429:
        return False
    return BROKEN_STATUS_MIN <= status_code <= BROKEN_STATUS_MAX


def map_link_error_code(exc: Exception) -> str:
    """Short error code for a failed link request."""
    message = normalize_whitespace(str(exc))
    if isinstance(exc, httpx.ConnectError) and "refused" in message.lower():
        return "ECONNREFUSED"
    if isinstance(exc, (RequestTimeoutError, httpx.TimeoutException)) or "timed out" in message.lower():
        return "ETIMEDOUT"
    if _SSL_PATTERN.search(message):
        return "SSL_ERROR"
    return "NETWORK_ERROR"


def _is_protected_domain(url: str, known_bot_blockers: tuple[str, ...]) -> bool:
    hostname = (urlsplit(url).hostname or "").lower()
    return hostname in known_bot_blockers


def _resolve_timeout(timeout_ms: int, fallback_ms: int) -> int:
    if not timeout_ms or timeout_ms <= 0:
        return fallback_ms
    return max(300, min(timeout_ms, fallback_ms))


class LinkChecker:
    """Checks link health with HEAD, falling back to GET on 405."""

    def __init__(self, client: httpx.AsyncClient, settings: SeoSettings, timeout_ms: int = 0):
        self._client = client
        self._settings = settings
        self._timeout_ms = timeout_ms

    async def _request(self, url: str, method: str, timeout_ms: int) -> tuple[int, str | None]:
        response = await fetch_with_timeout(
            self._client,
            url,
            method=method,
            timeout_ms=timeout_ms,
            follow_redirects=False,
            headers={"Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"},
        )
        await response.aclose()
        return response.status_code, safe_resolve_url(response.headers.get("location"), url)

    def _healthy(self, check: LinkCheck, status_code: int, location: str | None) -> LinkCheck:
        check.status_code = status_code
        check.is_broken = is_broken_status(status_code)
        check.is_rate_limited = status_code == 429
        check.is_redirect = status_code in REDIRECT_STATUS_CODES
        check.location = location if check.is_redirect else None
        if (
            _is_protected_domain(check.url, self._settings.known_bot_blockers)
            and status_code in BOT_BLOCKER_STATUS_CODES
        ):
            check.is_broken = False
            check.warning = f"Bot protection detected (Status {status_code}). Validated manually."
        return check

    def _errored(self, check: LinkCheck, exc: Exception) -> LinkCheck:
        check.status_code = map_link_error_code(exc)
        check.is_broken = True
        check.error = normalize_whitespace(str(exc)) or "Link check failed"
        return check

    async def check(self, url: str, link_type: str, priority: str) -> LinkCheck:
        check = LinkCheck(url=url, link_type=link_type, priority=priority)
        head_timeout = _resolve_timeout(self._timeout_ms, self._settings.link_check_timeout_ms)
        try:
            status_code, location = await self._request(url, "HEAD", head_timeout)
        except (httpx.HTTPError, RequestTimeoutError) as exc:
            return self._errored(check, exc)

        if status_code != HEAD_FALLBACK_STATUS:
            return self._healthy(check, status_code, location)

        check.checked_with = "GET"
        check.used_fallback = True
        get_timeout = _resolve_timeout(self._timeout_ms, self._settings.link_check_get_fallback_timeout_ms)
        try:
            status_code, location = await self._request(url, "GET", get_timeout)
        except (httpx.HTTPError, RequestTimeoutError) as exc:
            return self._errored(check, exc)
        return self._healthy(check, status_code, location)


async def analyze_link_health(
    client: httpx.AsyncClient,
    links: dict,
    settings: SeoSettings,
    timeout_ms: int = 0,
) -> dict:
    """Check internal then external links with bounded concurrency.

    Args:
        client: HTTP client
        links: Output of analyze_links
        settings: SEO settings (concurrency, timeouts, bot blockers)
        timeout_ms: Audit timeout, used to shorten link timeouts

    Returns:
        Counts plus dead link, redirect and warning lists
    """
    candidates = [(url, "internal", "HIGH") for url in links.get("internal", [])]
    candidates += [(url, "external", "MEDIUM") for url in links.get("external", [])]
    candidates = candidates[: settings.max_links_checked]

    checker = LinkChecker(client, settings, timeout_ms)
    semaphore = asyncio.Semaphore(max(1, settings.link_check_concurrency))

    async def bounded(candidate: tuple[str, str, str]) -> LinkCheck:
        async with semaphore:
            return await checker.check(*candidate)

    results = await asyncio.gather(*(bounded(c) for c in candidates))

    dead_links = []
    redirects = []
    warnings = []
    internal_broken = 0
    external_broken = 0
    rate_limited = 0

    for result in results:
        if result.is_rate_limited:
            rate_limited += 1
        if result.warning:
            warnings.append({"url": result.url, "message": result.warning})
        if result.is_broken:
            if result.link_type == "internal":
                internal_broken += 1
            else:
                external_broken += 1
            dead_link = {
                "url": result.url,
                "status_code": result.status_code,
                "link_type": result.link_type,
                "priority": result.priority,
            }
            if result.error:
                dead_link["error"] = result.error
            dead_links.append(dead_link)
        if result.is_redirect:
            redirects.append({
                "url": result.url,
                "status_code": result.status_code,
                "link_type": result.link_type,
                "location": result.location,
            })

    logger.debug("Checked %d link(s), %d broken", len(candidates), len(dead_links))

    return {
        "total_checked": len(candidates),
        "broken_count": len(dead_links),
        "rate_limited_count": rate_limited,
        "internal_broken_count": internal_broken,
        "external_broken_count": external_broken,
        "dead_links": dead_links,
        "redirect_count": len(redirects),
        "redirects": redirects,
        "warnings": warnings,
    }
