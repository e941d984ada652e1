"""User repository for database operations."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy import select

from onboarding.api.dependencies import DBSession
from onboarding.modules.users.models import User


class UserRepository:
    """Repository for the User lookups the audit API needs."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user.

        Args:
            user: User instance to create

        Returns:
            The created user with ID populated
        """
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: int) -> User | None:
        """Get a user by ID.

        Args:
            user_id: The user's ID

        Returns:
            User if found, None otherwise
        """
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email address.

        Args:
            email: The user's email

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()


# Type alias for dependency injection
UserRepo = Annotated[UserRepository, Depends(UserRepository)]
