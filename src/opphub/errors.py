"""
API error taxonomy.

Every error carries an HTTP status and a stable machine-readable ``code`` so
clients can branch without parsing messages. The global handlers in
``opphub.middleware.error_handler`` render them as ``{message, code, errors?}``.
"""

from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        *,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.errors = errors

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(ApiError):
    """Malformed input (400)."""

    status_code = 400
    code = "VALIDATION_ERROR"


class AuthError(ApiError):
    """Authentication failed (401). The code says which check failed."""

    status_code = 401
    code = "TOKEN_ERROR"


class BusinessRuleError(ApiError):
    """Request was well-formed but a business rule rejected it (400)."""

    status_code = 400
    code = "BUSINESS_RULE_VIOLATION"


class NotFoundError(ApiError):
    """Requested resource does not exist (404)."""

    status_code = 404
    code = "NOT_FOUND"


class RateLimitError(ApiError):
    """Too many requests from one client for a route class (429)."""

    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, message: str, code: str | None = None, *, retry_after: int) -> None:
        super().__init__(message, code)
        self.retry_after = retry_after

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["retryAfter"] = self.retry_after
        return body


class InternalError(ApiError):
    """Unexpected failure (500). The message is always generic."""

    status_code = 500
    code = "INTERNAL_ERROR"
