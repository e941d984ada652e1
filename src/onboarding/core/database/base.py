"""SQLAlchemy declarative base and common mixins."""

from datetime import datetime

from sqlalchemy import JSON, BigInteger, DateTime, Integer, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# BIGINT identity on PostgreSQL; SQLite only autoincrements INTEGER primary keys.
BigIntegerId = BigInteger().with_variant(Integer(), "sqlite")

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class IntegerIDMixin:
    """Mixin that adds a database-generated integer primary key.

    Ids increase with insertion order, so they double as a stable
    tie-breaker when two rows share a timestamp.
    """

    id: Mapped[int] = mapped_column(
        BigIntegerId,
        primary_key=True,
        autoincrement=True,
    )


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
