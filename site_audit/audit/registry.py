"""Audit registry for managing available auditors."""
from __future__ import annotations

import logging

from site_audit.audit.base import BaseAuditor
from site_audit.audit.errors import ConfigurationError, DuplicateAuditorError

logger = logging.getLogger(__name__)


class AuditRegistry:
    """Registry mapping auditor keys to auditor instances.

    Built once at startup and read by every run. Keys are unique and keep
    their insertion order.

    Usage:
        registry = AuditRegistry()
        registry.register(MyAuditor())
        report = await run_audits(AuditInput(url=...), registry)
    """

    def __init__(self):
        self._auditors: dict[str, BaseAuditor] = {}

    def register(self, auditor: BaseAuditor) -> None:
        """Register an auditor instance.

        Args:
            auditor: Auditor instance to register

        Raises:
            ConfigurationError: If the auditor has no key
            DuplicateAuditorError: If the key is already taken
        """
        key = getattr(auditor, "key", None)
        if not key:
            raise ConfigurationError("Auditor key is required")

        if key in self._auditors:
            raise DuplicateAuditorError(key)

        self._auditors[key] = auditor
        logger.debug("Registered auditor %s (%s)", key, auditor.name)

    def get(self, key: str) -> BaseAuditor | None:
        """Get an auditor by key.

        Returns:
            Auditor instance or None if not found
        """
        return self._auditors.get(key)

    def keys(self) -> list[str]:
        """List registered keys in registration order."""
        return list(self._auditors.keys())

    def list_all(self) -> list[BaseAuditor]:
        """List all registered auditors in registration order."""
        return list(self._auditors.values())

    def __contains__(self, key: object) -> bool:
        return key in self._auditors

    def __len__(self) -> int:
        return len(self._auditors)
