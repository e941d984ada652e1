"""Authentication module: bearer token verification and role gates."""

from onboarding.core.auth.backend import create_access_token, decode_token
from onboarding.core.auth.dependencies import (
    CurrentPm,
    CurrentUser,
    get_current_user,
    require_pm,
)
from onboarding.core.auth.middleware import ActorContextMiddleware
from onboarding.core.auth.schemas import TokenData


__all__ = [
    "ActorContextMiddleware",
    "CurrentPm",
    "CurrentUser",
    "TokenData",
    "create_access_token",
    "decode_token",
    "get_current_user",
    "require_pm",
]
