"""API response models."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# === Audit Models ===


class LogEntryModel(BaseModel):
    """Single audit log line."""

    level: Literal["INFO", "WARNING", "ERROR"]
    message: str


class AuditResultModel(BaseModel):
    """Result of one auditor."""

    key: str = Field(..., description="Auditor key", examples=["seo"])
    name: str = Field(..., description="Auditor display name")
    status: Literal["PASS", "WARN", "FAIL"]
    details: dict[str, Any] = Field(default_factory=dict, description="Auditor-specific details")
    logs: list[LogEntryModel] = Field(default_factory=list)


# === Summary Models ===


class Scoring(_CamelModel):
    """Score out of a fixed maximum."""

    score: int = Field(..., ge=0, le=100)
    out_of: int = Field(100, alias="outOf")


class FindingModel(_CamelModel):
    """WARNING or ERROR finding surfaced in the summary."""

    level: Literal["WARNING", "ERROR"]
    audit_key: str = Field(..., alias="auditKey")
    audit_name: str = Field(..., alias="auditName")
    message: str


class SummaryModel(_CamelModel):
    """Aggregate statistics across all audits."""

    total_audits: int = Field(..., ge=0, alias="totalAudits")
    info_count: int = Field(..., ge=0, alias="infoCount")
    warning_count: int = Field(..., ge=0, alias="warningCount")
    error_count: int = Field(..., ge=0, alias="errorCount")
    overall_score: int | None = Field(
        None, alias="overallScore", description="Rounded mean of numeric auditor scores"
    )
    scoring: Scoring | None = None
    top_findings: list[FindingModel] = Field(
        default_factory=list, alias="topFindings", description="Up to 5 findings, errors first"
    )


# === Report Models ===


class ReportResponse(_CamelModel):
    """Multi-auditor report."""

    url: str = Field(..., description="Normalized target URL")
    started_at: str = Field(..., alias="startedAt")
    finished_at: str = Field(..., alias="finishedAt")
    audits: list[AuditResultModel]
    summary: SummaryModel


class DeepReportResponse(ReportResponse):
    """Report with an attached deep analysis."""

    deep_analysis: dict[str, Any] = Field(
        ...,
        alias="deepAnalysis",
        description="Fix plan with agent_status, summary and steps",
    )


# === Health Models ===


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "degraded"]
    version: str
    timestamp: datetime
    checks: dict[str, bool] = Field(default_factory=dict)
