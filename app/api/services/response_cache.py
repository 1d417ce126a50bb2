"""In-memory response cache for audit endpoints."""
from __future__ import annotations

import json
from typing import Any

from cachetools import TTLCache


class ResponseCache:
    """TTL cache of response payloads keyed by scope and request input.

    A TTL of zero or less disables the cache: ``get`` always misses and
    ``set`` is a no-op.
    """

    def __init__(self, ttl_ms: int = 60_000, max_entries: int = 256):
        self.ttl_ms = ttl_ms
        self._entries: TTLCache[str, Any] | None = None
        if ttl_ms > 0:
            self._entries = TTLCache(maxsize=max_entries, ttl=ttl_ms / 1000)

    @property
    def enabled(self) -> bool:
        return self._entries is not None

    @staticmethod
    def build_key(scope: str, key: dict) -> str:
        return f"{scope}:{json.dumps(key, sort_keys=True, default=str)}"

    def get(self, scope: str, key: dict) -> Any | None:
        if self._entries is None:
            return None
        return self._entries.get(self.build_key(scope, key))

    def set(self, scope: str, key: dict, payload: Any) -> None:
        if self._entries is None:
            return
        self._entries[self.build_key(scope, key)] = payload

    def clear(self) -> None:
        if self._entries is not None:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries) if self._entries is not None else 0
