"""URL and HTTP helpers."""
from site_audit.fetcher.http import ensure_ok, fetch_with_timeout, open_client
from site_audit.fetcher.url import (
    assert_valid_url,
    is_http_url,
    normalize_audit_types,
    normalize_whitespace,
    safe_resolve_url,
)

__all__ = [
    "assert_valid_url",
    "ensure_ok",
    "fetch_with_timeout",
    "is_http_url",
    "normalize_audit_types",
    "normalize_whitespace",
    "open_client",
    "safe_resolve_url",
]
