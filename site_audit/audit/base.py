"""Base classes for the audit framework."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class LogLevel(str, Enum):
    """Severity of a single audit log entry."""
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class AuditStatus(str, Enum):
    """Overall outcome of one auditor run."""
    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"


@dataclass(frozen=True)
class LogEntry:
    """One message produced while auditing."""
    level: LogLevel
    message: str

    def to_dict(self) -> dict:
        return {"level": self.level.value, "message": self.message}


def derive_status(logs: Iterable[LogEntry]) -> AuditStatus:
    """Derive an audit status from its logs.

    Any ERROR means FAIL, otherwise any WARNING means WARN, otherwise PASS.
    """
    levels = {entry.level for entry in logs}
    if LogLevel.ERROR in levels:
        return AuditStatus.FAIL
    if LogLevel.WARNING in levels:
        return AuditStatus.WARN
    return AuditStatus.PASS


@dataclass(frozen=True)
class AuditInput:
    """Arguments shared by every auditor in one run.

    Attributes:
        url: Target URL. Normalized by the runner before auditors see it.
        timeout_ms: Per-request timeout in milliseconds, 0 disables it.
        types: Requested auditor keys in order, None selects every auditor.
        page_speed_api_key: Optional PageSpeed Insights key for the perf auditor.
        extra: Other auditor-specific options, passed through unchanged.
    """
    url: str
    timeout_ms: int = 0
    types: tuple[str, ...] | None = None
    page_speed_api_key: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.timeout_ms < 0:
            raise ValueError("timeout_ms must be a number >= 0")
        if self.types is not None and not isinstance(self.types, tuple):
            object.__setattr__(self, "types", tuple(self.types))

    def cache_key(self) -> dict:
        """Stable dict form of the input, used by response caches."""
        return {
            "url": self.url,
            "timeoutMs": self.timeout_ms,
            "types": list(self.types) if self.types is not None else None,
            "pageSpeedApiKey": self.page_speed_api_key,
            "extra": self.extra,
        }


@dataclass
class AuditResult:
    """Result of a single auditor run.

    Attributes:
        key: Key of the auditor that produced the result
        name: Human-readable name of the auditor
        status: PASS, WARN or FAIL, derived from logs
        details: Auditor-specific payload, may carry a numeric ``score``
        logs: Ordered log entries
    """
    key: str
    name: str
    status: AuditStatus
    details: dict[str, Any] = field(default_factory=dict)
    logs: list[LogEntry] = field(default_factory=list)

    @classmethod
    def from_logs(
        cls,
        key: str,
        name: str,
        logs: list[LogEntry],
        details: dict[str, Any] | None = None,
    ) -> AuditResult:
        """Build a result whose status follows from its logs."""
        return cls(
            key=key,
            name=name,
            status=derive_status(logs),
            details=details or {},
            logs=list(logs),
        )

    @classmethod
    def failure(cls, key: str, name: str, message: str) -> AuditResult:
        """Synthetic FAIL result for an auditor that raised."""
        return cls.from_logs(key, name, [LogEntry(LogLevel.ERROR, message)])

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "key": self.key,
            "name": self.name,
            "status": self.status.value,
            "details": self.details,
            "logs": [entry.to_dict() for entry in self.logs],
        }


@dataclass(frozen=True)
class Finding:
    """WARNING or ERROR log entry surfaced in the report summary."""
    level: LogLevel
    audit_key: str
    audit_name: str
    message: str

    def to_dict(self) -> dict:
        return {
            "level": self.level.value,
            "auditKey": self.audit_key,
            "auditName": self.audit_name,
            "message": self.message,
        }


@dataclass
class Summary:
    """Aggregate statistics across all audits of one report."""
    total_audits: int
    info_count: int
    warning_count: int
    error_count: int
    overall_score: int | None
    top_findings: list[Finding] = field(default_factory=list)

    @property
    def scoring(self) -> dict | None:
        if self.overall_score is None:
            return None
        return {"score": self.overall_score, "outOf": 100}

    def to_dict(self) -> dict:
        return {
            "totalAudits": self.total_audits,
            "infoCount": self.info_count,
            "warningCount": self.warning_count,
            "errorCount": self.error_count,
            "overallScore": self.overall_score,
            "scoring": self.scoring,
            "topFindings": [finding.to_dict() for finding in self.top_findings],
        }


@dataclass
class Report:
    """Output of one multi-auditor run."""
    url: str
    started_at: datetime
    finished_at: datetime
    audits: list[AuditResult]
    summary: Summary

    def get(self, key: str) -> AuditResult | None:
        """Return the result for an auditor key, if it was requested."""
        return next((audit for audit in self.audits if audit.key == key), None)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "url": self.url,
            "startedAt": _isoformat(self.started_at),
            "finishedAt": _isoformat(self.finished_at),
            "audits": [audit.to_dict() for audit in self.audits],
            "summary": self.summary.to_dict(),
        }


def _isoformat(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BaseAuditor(ABC):
    """Abstract base class for all auditors.

    Subclasses must implement:
    - key: Unique identifier
    - name: Human-readable name
    - run(): Inspect the target and return an AuditResult

    Instances are built once and shared across runs, so ``run`` must keep
    its working state local.
    """

    @property
    @abstractmethod
    def key(self) -> str:
        """Unique identifier for this auditor."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this auditor."""

    @property
    def description(self) -> str:
        """Optional description of what this auditor checks."""
        return ""

    @abstractmethod
    async def run(self, audit_input: AuditInput) -> AuditResult:
        """Execute the audit.

        Args:
            audit_input: Normalized URL, timeout and auditor options

        Returns:
            AuditResult with findings

        Raises:
            Any exception on transport or parse failure. The runner turns it
            into a FAIL result.
        """
