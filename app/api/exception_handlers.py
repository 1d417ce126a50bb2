"""Mapping from engine exceptions to HTTP error responses."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.models.errors import ErrorCodes, error_body
from site_audit.audit.errors import (
    HttpRequestError,
    InvalidUrlError,
    RequestTimeoutError,
    UnknownAuditTypeError,
)

logger = logging.getLogger(__name__)


def resolve_error(exc: Exception) -> tuple[int, dict]:
    """Return (status_code, body) for an exception raised while auditing."""
    if isinstance(exc, InvalidUrlError):
        return status.HTTP_400_BAD_REQUEST, error_body(
            ErrorCodes.INVALID_URL, str(exc), {"url": str(exc.url)}
        )
    if isinstance(exc, UnknownAuditTypeError):
        return status.HTTP_400_BAD_REQUEST, error_body(
            ErrorCodes.UNKNOWN_AUDIT_TYPE, str(exc), {"type": exc.key}
        )
    if isinstance(exc, RequestTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT, error_body(ErrorCodes.UPSTREAM_TIMEOUT, str(exc))
    if isinstance(exc, HttpRequestError):
        code = exc.status_code if exc.status_code and exc.status_code >= 400 else status.HTTP_502_BAD_GATEWAY
        return code, error_body(
            ErrorCodes.UPSTREAM_ERROR, str(exc), {"status_code": exc.status_code}
        )

    logger.exception("Unhandled error while auditing", exc_info=exc)
    return status.HTTP_500_INTERNAL_SERVER_ERROR, error_body(
        ErrorCodes.INTERNAL_ERROR, str(exc) or "Internal Server Error"
    )


async def audit_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code, body = resolve_error(exc)
    return JSONResponse(status_code=status_code, content=body)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(error.get("loc", ())), "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(ErrorCodes.INVALID_REQUEST, message, {"errors": errors}),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = ErrorCodes.NOT_FOUND if exc.status_code == 404 else ErrorCodes.INVALID_REQUEST
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    for exc_type in (InvalidUrlError, UnknownAuditTypeError, RequestTimeoutError, HttpRequestError):
        app.add_exception_handler(exc_type, audit_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, audit_error_handler)
