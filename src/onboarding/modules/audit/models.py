"""Audit log database model.

One row per administrative action: who did what to which resource,
when, and what the resource looked like before and after.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, event, func
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from onboarding.core.constants import MAX_ACTION_TYPE_LENGTH, MAX_ENTITY_TYPE_LENGTH
from onboarding.core.database.base import Base, BigIntegerId, IntegerIDMixin, JSONType
from onboarding.core.errors import ConflictError


if TYPE_CHECKING:
    from onboarding.modules.users.models import User


class ActionType(str, Enum):
    """Closed set of auditable actions.

    Reads are never audited; only actions that change data or move it
    in or out of the portal, plus session events.
    """

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ASSIGN = "ASSIGN"
    EXPORT = "EXPORT"
    IMPORT = "IMPORT"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"


class AuditLogImmutableError(ConflictError):
    """Raised when something tries to modify or remove a written audit entry."""

    message = "Audit log entries are append-only"
    error_code = "audit_log_immutable"


class AuditLog(Base, IntegerIDMixin):
    """Audit log entry.

    Attributes:
        action_type: What kind of action was performed
        entity_type: Class name of the affected resource ("Track", "Instructor")
        entity_id: ID of the affected resource (None for bulk or system actions)
        performed_by_id: Acting PM (None for system actions or removed users)
        old_value: JSON snapshot before the action (None for CREATE)
        new_value: JSON snapshot after the action (None for DELETE)
        description: Human-readable summary
        metadata_: Request context and other free-form data
        action_time: When the action happened; never changes
        created_at: When the row was inserted
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_action_time", "action_time"),
        Index("ix_audit_logs_performed_by_action_time", "performed_by_id", "action_time"),
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
        Index("ix_audit_logs_action_type", "action_type"),
    )

    action_type: Mapped[ActionType] = mapped_column(
        SAEnum(ActionType, native_enum=False, length=MAX_ACTION_TYPE_LENGTH),
        nullable=False,
    )
    entity_type: Mapped[str] = mapped_column(
        String(MAX_ENTITY_TYPE_LENGTH),
        nullable=False,
    )
    entity_id: Mapped[int | None] = mapped_column(
        BigIntegerId,
        nullable=True,
    )

    performed_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Data
    old_value: Mapped[Any | None] = mapped_column(JSONType, nullable=True)
    new_value: Mapped[Any | None] = mapped_column(JSONType, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata",  # Column name in database
        JSONType,
        nullable=True,
    )

    # Timestamps
    action_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        nullable=False,
    )

    # Loading is always explicit (joinedload) so listings never issue a
    # per-row actor query.
    performed_by: Mapped["User | None"] = relationship(
        "User",
        lazy="raise",
    )

    @property
    def is_create_action(self) -> bool:
        return self.action_type == ActionType.CREATE

    @property
    def is_update_action(self) -> bool:
        return self.action_type == ActionType.UPDATE

    @property
    def is_delete_action(self) -> bool:
        return self.action_type == ActionType.DELETE

    @property
    def has_performer(self) -> bool:
        return self.performed_by_id is not None

    @property
    def has_old_value(self) -> bool:
        return self.old_value not in (None, "", {}, [])

    @property
    def has_new_value(self) -> bool:
        return self.new_value not in (None, "", {}, [])

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, action_type={self.action_type}, "
            f"entity_type={self.entity_type}, entity_id={self.entity_id})>"
        )


@event.listens_for(AuditLog, "before_update")
def _reject_update(_mapper: Any, _connection: Any, target: AuditLog) -> None:
    raise AuditLogImmutableError(details={"audit_log_id": target.id})


@event.listens_for(AuditLog, "before_delete")
def _reject_delete(_mapper: Any, _connection: Any, target: AuditLog) -> None:
    raise AuditLogImmutableError(details={"audit_log_id": target.id})
