"""Domain exceptions for the application.

These exceptions represent business-logic errors and are automatically
converted to RFC 7807 Problem Details responses by the exception handlers.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class ConflictError(AppException):
    """Raised when an operation conflicts with existing data.

    Example:
        raise ConflictError("Audit log entries are append-only")
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class UnauthorizedError(AppException):
    """Raised when authentication is required but not provided or invalid."""

    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when the caller lacks the role required for a resource.

    Example:
        raise ForbiddenError(
            "This action requires PM role",
            details={"required_role": "PM"},
        )
    """

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


class ServiceUnavailableError(AppException):
    """Raised when the backing store cannot serve the request."""

    message = "Service temporarily unavailable"
    error_code = "service_unavailable"
    status_code = 503
