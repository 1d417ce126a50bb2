"""API Pydantic models."""
from app.api.models.errors import ErrorCodes, ErrorDetail, ErrorResponse
from app.api.models.requests import AuditRequest
from app.api.models.responses import DeepReportResponse, HealthResponse, ReportResponse

__all__ = [
    "AuditRequest",
    "ReportResponse",
    "DeepReportResponse",
    "HealthResponse",
    "ErrorResponse",
    "ErrorDetail",
    "ErrorCodes",
]
