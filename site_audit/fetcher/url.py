"""URL validation and normalization helpers."""
from __future__ import annotations

import re
from collections.abc import Iterable
from urllib.parse import urljoin, urlsplit, urlunsplit

from site_audit.audit.errors import InvalidUrlError

HTTP_SCHEMES = {"http", "https"}

_WHITESPACE = re.compile(r"\s+")


def normalize_whitespace(value: object) -> str:
    """Collapse runs of whitespace and trim. None becomes an empty string."""
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value)).strip()


def assert_valid_url(raw: object) -> str:
    """Validate and normalize an absolute http/https URL.

    Lowercases scheme and host, gives a bare host the root path and drops
    the fragment.

    Raises:
        InvalidUrlError: If the value is not an absolute http/https URL
    """
    if not isinstance(raw, str):
        raise InvalidUrlError(raw)

    candidate = raw.strip()
    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
        port = parts.port  # raises ValueError on a malformed port
    except ValueError as exc:
        raise InvalidUrlError(raw) from exc

    scheme = parts.scheme.lower()
    if scheme not in HTTP_SCHEMES or not hostname or any(c.isspace() for c in parts.netloc):
        raise InvalidUrlError(raw)

    netloc = hostname
    if ":" in hostname:  # IPv6 literal
        netloc = f"[{hostname}]"
    if port is not None and not (
        (scheme == "http" and port == 80) or (scheme == "https" and port == 443)
    ):
        netloc = f"{netloc}:{port}"
    if parts.username or parts.password:
        userinfo = parts.username or ""
        if parts.password:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


def is_http_url(url: str | None) -> bool:
    """Check whether a string is an absolute http/https URL."""
    if not url:
        return False
    try:
        parts = urlsplit(url)
        return parts.scheme.lower() in HTTP_SCHEMES and bool(parts.hostname)
    except ValueError:
        return False


def safe_resolve_url(raw: str | None, base: str | None) -> str | None:
    """Resolve a possibly relative URL against a base, None on failure."""
    candidate = normalize_whitespace(raw)
    if not candidate or not base:
        return None
    try:
        return urljoin(base, candidate)
    except ValueError:
        return None


def normalize_audit_types(values: Iterable[object] | None, defaults: Iterable[str]) -> list[str]:
    """Normalize requested audit keys.

    Accepts repeated and comma-separated values, trims them, drops empties
    and duplicates (first occurrence wins). Falls back to ``defaults`` when
    nothing is left.

    Example:
        >>> normalize_audit_types(["perf, seo", "perf"], ["perf", "seo", "security"])
        ['perf', 'seo']
    """
    normalized: list[str] = []
    for value in values or []:
        for part in str(value).split(","):
            part = part.strip()
            if part and part not in normalized:
                normalized.append(part)

    if not normalized:
        return list(defaults)
    return normalized
