"""Zero-based pagination primitives shared by repositories and routes."""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from onboarding.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class PageRequest:
    """A zero-based page index and a page size.

    Bounds are validated at the HTTP boundary; repositories trust them.
    """

    page: int = DEFAULT_PAGE
    size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the size of the full result set."""

    content: Sequence[T] = field(default_factory=list)
    total_elements: int = 0
    page_number: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_elements / self.page_size)

    @classmethod
    def empty(cls, request: PageRequest) -> "Page[T]":
        return cls(content=[], total_elements=0, page_number=request.page, page_size=request.size)

    def map(self, fn: Callable[[T], U]) -> "Page[U]":
        """Return the same page with every item converted by ``fn``."""
        return Page(
            content=[fn(item) for item in self.content],
            total_elements=self.total_elements,
            page_number=self.page_number,
            page_size=self.page_size,
        )
