"""Audit log module: append-only action history and the PM query API."""

from onboarding.modules.audit.models import ActionType, AuditLog, AuditLogImmutableError
from onboarding.modules.audit.routes import router
from onboarding.modules.audit.services import (
    AuditContext,
    AuditQueryService,
    AuditService,
)


__all__ = [
    "ActionType",
    "AuditContext",
    "AuditLog",
    "AuditLogImmutableError",
    "AuditQueryService",
    "AuditService",
    "router",
]
