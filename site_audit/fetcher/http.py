"""Async HTTP helpers shared by the auditors."""
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from site_audit.audit.errors import HttpRequestError, RequestTimeoutError
from site_audit.config.settings import FetcherSettings
from site_audit.config.settings import settings as default_settings


@asynccontextmanager
async def open_client(
    client: httpx.AsyncClient | None = None,
    settings: FetcherSettings | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a fresh one closed on exit.

    An injected client belongs to the caller and is left open. A fresh
    client takes its user agent and redirect policy from ``settings``.
    """
    if client is not None:
        yield client
        return

    cfg = settings or default_settings.fetcher
    async with httpx.AsyncClient(
        follow_redirects=cfg.follow_redirects,
        headers={"User-Agent": cfg.user_agent},
        timeout=None,
    ) as fresh:
        yield fresh


def resolve_timeout_ms(timeout_ms: int, settings: FetcherSettings | None = None) -> int:
    """Requested timeout, or the configured default when none was requested."""
    if timeout_ms and timeout_ms > 0:
        return timeout_ms
    cfg = settings or default_settings.fetcher
    return max(cfg.default_timeout_ms, 0)


async def fetch_with_timeout(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    timeout_ms: int = 0,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request, aborting it after ``timeout_ms`` milliseconds.

    The deadline covers the whole exchange, body included. A timeout of 0
    means no timeout.

    Raises:
        RequestTimeoutError: If the request did not complete in time
    """
    timeout = timeout_ms / 1000 if timeout_ms and timeout_ms > 0 else None
    try:
        async with asyncio.timeout(timeout):
            return await client.request(method, url, timeout=timeout, **kwargs)
    except (TimeoutError, httpx.TimeoutException) as exc:
        raise RequestTimeoutError(f"Request timed out after {timeout_ms}ms") from exc


def ensure_ok(response: httpx.Response, context: str) -> httpx.Response:
    """Raise HttpRequestError unless the response is 2xx."""
    if response.is_success:
        return response

    message = f"{context} failed with status {response.status_code} {response.reason_phrase or ''}".strip()
    raise HttpRequestError(message, response.status_code)
