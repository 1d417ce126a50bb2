"""Audit framework: auditor contract, registry, runner and summary."""
from site_audit.audit.base import (
    AuditInput,
    AuditResult,
    AuditStatus,
    BaseAuditor,
    Finding,
    LogEntry,
    LogLevel,
    Report,
    Summary,
    derive_status,
)
from site_audit.audit.errors import (
    AuditError,
    ConfigurationError,
    DuplicateAuditorError,
    HttpRequestError,
    InvalidUrlError,
    RequestTimeoutError,
    UnknownAuditTypeError,
)
from site_audit.audit.events import AuditEvent, AuditEventSink, AuditEventType
from site_audit.audit.registry import AuditRegistry
from site_audit.audit.summary import summarize
from site_audit.audit.runner import run_audits

__all__ = [
    "AuditError",
    "AuditEvent",
    "AuditEventSink",
    "AuditEventType",
    "AuditInput",
    "AuditRegistry",
    "AuditResult",
    "AuditStatus",
    "BaseAuditor",
    "ConfigurationError",
    "DuplicateAuditorError",
    "Finding",
    "HttpRequestError",
    "InvalidUrlError",
    "LogEntry",
    "LogLevel",
    "Report",
    "RequestTimeoutError",
    "Summary",
    "UnknownAuditTypeError",
    "derive_status",
    "run_audits",
    "summarize",
]
