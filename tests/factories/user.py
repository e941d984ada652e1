"""User factory for tests."""

from datetime import UTC, datetime
from uuid import uuid4

from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from onboarding.modules.users.models import User, UserRole


class UserFactory(SQLAlchemyFactory[User]):
    """Factory for creating test User instances."""

    __model__ = User
    __set_primary_key__ = False
    __set_relationships__ = False

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"user-{uuid4().hex[:8]}@example.com"

    @classmethod
    def name(cls) -> str:
        """Generate a display name."""
        return f"Test User {uuid4().hex[:4]}"

    @classmethod
    def role(cls) -> UserRole:
        """Default to PM."""
        return UserRole.PM

    @classmethod
    def is_active(cls) -> bool:
        """Default to active."""
        return True

    @classmethod
    def deleted_at(cls) -> datetime | None:
        """Default to not withdrawn."""
        return None

    @classmethod
    def created_at(cls) -> datetime:
        return datetime.now(UTC)

    @classmethod
    def updated_at(cls) -> datetime:
        return datetime.now(UTC)
