"""Error handling module with RFC 7807 Problem Details."""

from onboarding.core.errors.exceptions import (
    AppException,
    ConflictError,
    ForbiddenError,
    ServiceUnavailableError,
    UnauthorizedError,
)
from onboarding.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    "AppException",
    "ConflictError",
    "FieldError",
    "ForbiddenError",
    "ProblemDetail",
    "ServiceUnavailableError",
    "UnauthorizedError",
    "register_exception_handlers",
]
