"""FastAPI dependencies for authentication.

- Extracting and validating the bearer token
- Loading the current user
- Requiring the PM role
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from onboarding.core.auth.backend import decode_token
from onboarding.core.auth.schemas import TokenData
from onboarding.core.errors import ForbiddenError, UnauthorizedError
from onboarding.modules.users.models import User, UserRole
from onboarding.modules.users.repos import UserRepo


bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_data(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenData:
    """Extract and validate token data from the Authorization header.

    Raises:
        UnauthorizedError: If token is missing, invalid or not an access token
    """
    if not credentials:
        raise UnauthorizedError(
            "Missing authentication token",
            error_code="missing_token",
        )

    token_data = decode_token(credentials.credentials)
    if not token_data:
        raise UnauthorizedError(
            "Invalid or expired token",
            error_code="invalid_token",
        )

    if token_data.type != "access":
        raise UnauthorizedError(
            "Invalid token type",
            error_code="invalid_token_type",
        )

    return token_data


async def get_current_user(
    token_data: Annotated[TokenData, Depends(get_token_data)],
    users: UserRepo,
) -> User:
    """Load the authenticated user.

    Raises:
        UnauthorizedError: If the user no longer exists or was withdrawn
        ForbiddenError: If the account is deactivated
    """
    user = await users.get_by_id(token_data.user_id)

    if not user or user.is_deleted:
        raise UnauthorizedError(
            "User not found",
            error_code="user_not_found",
        )

    if not user.is_active:
        raise ForbiddenError(
            "User account is deactivated",
            error_code="user_inactive",
        )

    return user


async def require_pm(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Get the current user, ensuring they hold the PM role.

    The role is read from the stored user rather than the token claim,
    so a demotion takes effect before the token expires.

    Raises:
        ForbiddenError: If the user is not a PM
    """
    if user.role != UserRole.PM:
        raise ForbiddenError(
            "This action requires PM role",
            error_code="pm_required",
            details={"required_role": UserRole.PM.value},
        )
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentPm = Annotated[User, Depends(require_pm)]
