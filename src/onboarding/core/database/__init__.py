"""Database layer - session management, base models, and mixins."""

from onboarding.core.database.base import (
    Base,
    BigIntegerId,
    IntegerIDMixin,
    JSONType,
    TimestampMixin,
)
from onboarding.core.database.session import (
    async_engine,
    async_session_factory,
    get_db,
)


__all__ = [
    "Base",
    "BigIntegerId",
    "IntegerIDMixin",
    "JSONType",
    "TimestampMixin",
    "async_engine",
    "async_session_factory",
    "get_db",
]
