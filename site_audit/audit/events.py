"""Lifecycle events emitted by the audit runner."""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from site_audit.audit.base import AuditResult


class AuditEventType(str, Enum):
    STARTED = "audit_started"
    COMPLETED = "audit_completed"
    FAILED = "audit_failed"


@dataclass(frozen=True)
class AuditEvent:
    """One auditor lifecycle transition.

    ``result`` is set for COMPLETED and FAILED events only.
    """
    type: AuditEventType
    audit_key: str
    audit_name: str
    result: AuditResult | None = None

    def to_dict(self) -> dict:
        data = {
            "type": self.type.value,
            "auditKey": self.audit_key,
            "auditName": self.audit_name,
        }
        if self.result is not None:
            data["result"] = self.result.to_dict()
        return data


# Synchronous, side-effect-only callback. Called from the event loop thread.
AuditEventSink = Callable[[AuditEvent], None]
