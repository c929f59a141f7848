"""Page of repository results with pagination metadata."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, Iterator, List, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """
    One page of results.

    Attributes:
        items: Entities on this page
        total: Number of entities matching the query across all pages
        page: 1-based page number
        per_page: Requested page size
    """

    items: List[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 15

    def __post_init__(self) -> None:
        if self.per_page < 1:
            raise ValueError(f"per_page must be positive, got {self.per_page}")
        if self.page < 1:
            raise ValueError(f"page must be positive, got {self.page}")

    @property
    def last_page(self) -> int:
        return max(math.ceil(self.total / self.per_page), 1)

    @property
    def has_more(self) -> bool:
        return self.page < self.last_page

    @property
    def from_index(self) -> int | None:
        """1-based position of the first item, None for an empty page."""
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + 1

    @property
    def to_index(self) -> int | None:
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


__all__ = ["Page"]
