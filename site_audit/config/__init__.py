"""Configuration package."""
from site_audit.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
