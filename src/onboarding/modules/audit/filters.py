"""Explicit optional filters for audit queries.

A filter is either ``UNSET`` (match every value) or ``Equals(value)``.
``Equals(None)`` is a real filter that matches NULL, so "no filter" and
"filter on NULL" can never be confused.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, true
from sqlalchemy.orm import InstrumentedAttribute


T = TypeVar("T")


@dataclass(frozen=True)
class Unset:
    """Filter that matches all values."""

    def __repr__(self) -> str:
        return "UNSET"


@dataclass(frozen=True)
class Equals(Generic[T]):
    """Filter that matches a single value (or NULL when ``value`` is None)."""

    value: T


UNSET = Unset()

Filter = Unset | Equals[Any]


def from_optional(value: T | None) -> "Unset | Equals[T]":
    """Treat None as "no filter", the convention used by HTTP query params."""
    return UNSET if value is None else Equals(value)


def to_criterion(column: InstrumentedAttribute[Any], flt: Filter) -> ColumnElement[bool]:
    """Build the SQL criterion for ``flt`` applied to ``column``.

    Raises:
        TypeError: If ``flt`` is not a filter
    """
    if isinstance(flt, Unset):
        return true()
    if isinstance(flt, Equals):
        if flt.value is None:
            return column.is_(None)
        return column == flt.value
    raise TypeError(f"Unsupported filter: {flt!r}")
