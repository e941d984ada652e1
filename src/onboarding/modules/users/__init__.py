"""Portal users referenced as audit actors."""

from onboarding.modules.users.models import User, UserRole


__all__ = ["User", "UserRole"]
