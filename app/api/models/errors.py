"""API error response models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(
        default=None, description="Additional error details"
    )


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: ErrorDetail

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": {
                    "code": "INVALID_URL",
                    "message": "Invalid URL: example",
                    "details": {"url": "example"},
                }
            }
        }
    }


class ErrorCodes:
    """Standardized error codes."""

    # 4xx Client Errors
    INVALID_URL = "INVALID_URL"
    INVALID_REQUEST = "INVALID_REQUEST"
    UNKNOWN_AUDIT_TYPE = "UNKNOWN_AUDIT_TYPE"
    NOT_FOUND = "NOT_FOUND"

    # 5xx Server Errors
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    UPSTREAM_TIMEOUT = "UPSTREAM_TIMEOUT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def error_body(code: str, message: str, details: dict[str, Any] | None = None) -> dict:
    """JSON body for an error response."""
    return ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details)
    ).model_dump()
