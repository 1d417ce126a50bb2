"""API dependencies: settings, registry, response cache and deep analyst."""
from __future__ import annotations

from functools import lru_cache

from dotenv import load_dotenv

from app.api.services.response_cache import ResponseCache
from site_audit.analyze import create_default_registry
from site_audit.audit.registry import AuditRegistry
from site_audit.config.settings import Settings
from site_audit.deep.agent import DeepAnalyst


@lru_cache
def get_settings() -> Settings:
    """Settings built after loading ``.env``."""
    load_dotenv()
    return Settings()


@lru_cache
def get_registry() -> AuditRegistry:
    return create_default_registry(settings=get_settings())


@lru_cache
def get_response_cache() -> ResponseCache:
    api = get_settings().api
    return ResponseCache(ttl_ms=api.cache_ttl_ms, max_entries=api.cache_max_entries)


@lru_cache
def get_deep_analyst() -> DeepAnalyst:
    return DeepAnalyst(settings=get_settings().deep)
