"""
Protocol definitions for repository interfaces.

Application code declares one interface per entity by extending
``RepositoryInterface`` and binds it to an implementation in a
``RepositoryRegistry``.

Example:
    class AuthorRepositoryInterface(RepositoryInterface[Author], Protocol):
        async def find_by_email(self, email: str) -> Author | None: ...
"""

from __future__ import annotations

from typing import (
    Any,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    TypeVar,
)

from repokit.core.repository.pagination import Page
from repokit.criteria.base import Criterion

T_Model = TypeVar("T_Model")
Columns = Optional[Sequence[str]]


class RepositoryInterface(Protocol, Generic[T_Model]):
    """Repository protocol defining the contract for data access."""

    async def find_one_by(
        self, value: Any, field: str | None = None, columns: Columns = None
    ) -> Optional[T_Model]:
        """Return the first entity whose ``field`` equals ``value``, or None."""
        ...

    async def find_all(self, columns: Columns = None) -> List[T_Model]:
        """Return every entity. Eager loads apply, stored criteria do not."""
        ...

    async def find_all_by(
        self, value: Any, field: str, columns: Columns = None
    ) -> List[T_Model]:
        """Return every entity whose ``field`` equals ``value``."""
        ...

    async def find_all_where_in(
        self, values: Iterable[Any], field: str, columns: Columns = None
    ) -> List[T_Model]:
        """Return every entity whose ``field`` is one of ``values``."""
        ...

    def with_relations(
        self, relations: str | Iterable[str] | None, *more: str
    ) -> RepositoryInterface[T_Model]:
        """Eager-load the named relationships on later reads."""
        ...

    def add_criteria(self, criterion: Criterion) -> RepositoryInterface[T_Model]:
        """Append a criterion to the scope."""
        ...

    async def find_one_by_criteria(self, columns: Columns = None) -> Optional[T_Model]:
        """Return the first entity matching the stored criteria."""
        ...

    async def find_all_by_criteria(self, columns: Columns = None) -> List[T_Model]:
        """Return every entity matching the stored criteria."""
        ...

    def skip_criteria(self, status: bool = True) -> RepositoryInterface[T_Model]:
        """Ignore (or stop ignoring) the stored criteria without dropping them."""
        ...

    def get_criteria(self) -> Tuple[Criterion, ...]:
        """Return the stored criteria in insertion order."""
        ...

    async def paginate(
        self, per_page: int | None = None, columns: Columns = None
    ) -> Page[T_Model]:
        """Return one page of entities matching the stored criteria."""
        ...

    def set_current_page(self, page: int) -> RepositoryInterface[T_Model]:
        """Override the page ``paginate`` returns."""
        ...

    def reset_scope(self) -> RepositoryInterface[T_Model]:
        """Drop criteria, eager loads, skip flag and page override."""
        ...

    async def create(self, data: Mapping[str, Any]) -> T_Model:
        """Persist a new entity built from the fillable keys of ``data``."""
        ...

    async def update_by(
        self, data: Mapping[str, Any], value: Any, field: str | None = None
    ) -> int:
        """Update every matching entity with the fillable keys of ``data``."""
        ...

    async def delete(self, value: Any, field: str | None = None) -> bool:
        """Delete (or soft-delete) every matching entity. Always True."""
        ...

    async def count(self) -> int:
        """Count entities matching the stored criteria."""
        ...


__all__ = ["Columns", "RepositoryInterface", "T_Model"]
