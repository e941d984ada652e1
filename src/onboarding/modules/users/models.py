"""User database models."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from onboarding.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH, MAX_ROLE_LENGTH
from onboarding.core.database.base import Base, IntegerIDMixin, TimestampMixin


class UserRole(str, Enum):
    """Portal roles. Only PMs perform administrative actions."""

    PM = "PM"
    INSTRUCTOR = "INSTRUCTOR"


class User(Base, IntegerIDMixin, TimestampMixin):
    """A portal user: a PM or an instructor.

    Users are soft-deleted so that audit entries keep pointing at the
    person who performed an action after they leave.

    Attributes:
        email: Unique email address
        name: Display name
        role: PM or INSTRUCTOR
        is_active: Whether the user can authenticate
        deleted_at: Set when the account is withdrawn
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, native_enum=False, length=MAX_ROLE_LENGTH),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_pm(self) -> bool:
        return self.role == UserRole.PM

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
