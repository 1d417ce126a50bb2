"""Unit tests for the auditor registry."""
from __future__ import annotations

import pytest

from site_audit.audit.errors import ConfigurationError, DuplicateAuditorError
from site_audit.audit.registry import AuditRegistry


class TestRegister:
    """Tests for AuditRegistry.register."""

    def test_register_and_get(self, make_auditor):
        """Registered auditor is returned by key."""
        registry = AuditRegistry()
        auditor = make_auditor("perf")
        registry.register(auditor)

        assert registry.get("perf") is auditor
        assert "perf" in registry
        assert len(registry) == 1

    def test_duplicate_key_rejected(self, make_auditor):
        """Second auditor with the same key is rejected."""
        registry = AuditRegistry()
        registry.register(make_auditor("seo"))

        with pytest.raises(DuplicateAuditorError, match='Auditor "seo" is already registered'):
            registry.register(make_auditor("seo", name="Other SEO"))

        assert registry.get("seo").name == "Seo Auditor"

    def test_empty_key_rejected(self, make_auditor):
        """Auditor without a key is a configuration error."""
        registry = AuditRegistry()

        with pytest.raises(ConfigurationError, match="Auditor key is required"):
            registry.register(make_auditor(""))

        assert len(registry) == 0


class TestLookup:
    """Tests for lookups and listing."""

    def test_unknown_key_returns_none(self):
        assert AuditRegistry().get("missing") is None

    def test_keys_in_registration_order(self, make_auditor, make_registry):
        registry = make_registry(
            make_auditor("security"),
            make_auditor("perf"),
            make_auditor("seo"),
        )

        assert registry.keys() == ["security", "perf", "seo"]
        assert [a.key for a in registry.list_all()] == ["security", "perf", "seo"]

    def test_empty_registry(self):
        registry = AuditRegistry()

        assert registry.keys() == []
        assert registry.list_all() == []
