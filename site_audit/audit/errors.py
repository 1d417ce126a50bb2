"""Exception types raised by the audit engine and its auditors."""
from __future__ import annotations


class AuditError(Exception):
    """Base class for all audit engine errors."""


class ConfigurationError(AuditError):
    """Registry or audit selection is misconfigured. Never retried."""


class UnknownAuditTypeError(ConfigurationError):
    """A requested audit key has no registered auditor."""

    def __init__(self, key: str):
        super().__init__(f"Unknown audit type: {key}")
        self.key = key


class DuplicateAuditorError(ConfigurationError):
    """An auditor key was registered twice."""

    def __init__(self, key: str):
        super().__init__(f'Auditor "{key}" is already registered')
        self.key = key


class InvalidUrlError(AuditError, ValueError):
    """Target is not a well-formed absolute http/https URL."""

    def __init__(self, raw: object):
        super().__init__(f"Invalid URL: {raw}")
        self.url = raw


class HttpRequestError(AuditError):
    """Upstream request returned a non-2xx response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RequestTimeoutError(AuditError):
    """Upstream request did not finish within the configured timeout."""
