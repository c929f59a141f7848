"""
SQLAlchemy-backed repository.

A repository wraps one mapped class and one ``AsyncSession``. Callers
configure a scope (criteria, eager loads, page) and then run a read; the
query is composed fresh from the pristine base query on every read.

Example:
    repo = SqlAlchemyRepository(Book, session)
    books = await (
        repo.with_relations("author")
        .add_criteria(OrderBy("id", "desc"))
        .find_all_by("fantasy", "genre")
    )
    repo.reset_scope()
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import (
    Any,
    Dict,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy import update as sa_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import InstrumentedAttribute
from sqlalchemy.sql import Select

from repokit.core.query_optimization import QueryOptimizer, normalize_names
from repokit.core.repository.pagination import Page
from repokit.core.repository.protocols import Columns
from repokit.core.settings import get_settings
from repokit.criteria.base import Criterion
from repokit.domain.base import Base, fillable_fields, is_soft_deletable

logger = logging.getLogger(__name__)

T_Model = TypeVar("T_Model", bound=Base)


class SqlAlchemyRepository(Generic[T_Model]):
    """
    Generic repository providing criteria-driven reads and filtered writes.

    Type Parameters:
        T_Model: The SQLAlchemy model type this repository manages

    Example:
        class AuthorRepository(SqlAlchemyRepository[Author]):
            def __init__(self, session: AsyncSession):
                super().__init__(Author, session)

            async def find_by_email(self, email: str) -> Author | None:
                return await self.find_one_by(email, "email")

    Instances hold mutable scope and belong to one unit of work; do not share
    them between concurrent callers.
    """

    # None derives the field from a single-column primary key, falling back to "id"
    identity_field: Optional[str] = None

    def __init__(self, model: Type[T_Model], session: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session
        if self.identity_field is None:
            self.identity_field = QueryOptimizer.primary_key_name(model) or "id"
        self._base_query: Select = self._make_base_query()
        self._query: Select = self._base_query
        self._criteria: List[Criterion] = []
        self._with: Optional[Tuple[str, ...]] = None
        self._skip_criteria = False
        self._current_page: Optional[int] = None

    @property
    def model_name(self) -> str:
        """Get the model name for log and error messages."""
        return self.model.__name__

    @property
    def base_query(self) -> Select:
        return self._base_query

    @property
    def query(self) -> Select:
        """The most recently composed statement."""
        return self._query

    @property
    def current_page(self) -> Optional[int]:
        return self._current_page

    @property
    def eager_loads(self) -> Tuple[str, ...]:
        return self._with or ()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_one_by(
        self, value: Any, field: str | None = None, columns: Columns = None
    ) -> Optional[T_Model]:
        """
        Find the first entity whose field equals value.

        Args:
            value: Value to match
            field: Column name, defaults to the identity field
            columns: Columns to load, all when omitted

        Returns:
            The entity, or None when nothing matches
        """
        stmt = self._prepare(columns).where(self._column(field) == value)
        return await self._first(stmt)

    async def find_all_by(
        self, value: Any, field: str, columns: Columns = None
    ) -> List[T_Model]:
        stmt = self._prepare(columns).where(self._column(field) == value)
        return await self._all(stmt)

    async def find_all_where_in(
        self, values: Iterable[Any], field: str, columns: Columns = None
    ) -> List[T_Model]:
        """Find every entity whose field is one of values."""
        stmt = self._prepare(columns).where(self._column(field).in_(list(values)))
        return await self._all(stmt)

    async def find_all(self, columns: Columns = None) -> List[T_Model]:
        """
        Find every entity of the managed type.

        Eager loads are honored. Stored criteria are not applied here; use
        ``find_all_by_criteria`` for a filtered listing.
        """
        stmt = self._prepare(columns, apply_criteria=False)
        return await self._all(stmt)

    async def find_one_by_criteria(self, columns: Columns = None) -> Optional[T_Model]:
        return await self._first(self._prepare(columns))

    async def find_all_by_criteria(self, columns: Columns = None) -> List[T_Model]:
        return await self._all(self._prepare(columns))

    async def paginate(
        self, per_page: int | None = None, columns: Columns = None
    ) -> Page[T_Model]:
        """
        Return one page of entities matching the current scope.

        Args:
            per_page: Page size, defaults to ``Settings.default_per_page``
            columns: Columns to load, all when omitted

        Returns:
            Page with the items and the total match count
        """
        if per_page is None:
            per_page = get_settings().default_per_page
        if per_page < 1:
            raise ValueError(f"per_page must be positive, got {per_page}")

        page = self._current_page or 1
        total = await self._scalar(QueryOptimizer.count_statement(self._compose(eager=False)))

        stmt = self._prepare(columns).limit(per_page).offset((page - 1) * per_page)
        items = await self._all(stmt)

        return Page(items=items, total=total, page=page, per_page=per_page)

    async def count(self) -> int:
        """Count entities matching the current scope."""
        stmt = QueryOptimizer.count_statement(self._compose(eager=False))
        return await self._scalar(stmt)

    # ------------------------------------------------------------------
    # Scope
    # ------------------------------------------------------------------

    def with_relations(
        self, relations: str | Iterable[str] | None, *more: str
    ) -> SqlAlchemyRepository[T_Model]:
        """
        Eager-load relationships on subsequent reads.

        Accepts ``"books"``, ``"books", "reviews"`` or ``["books", "reviews"]``.
        Dotted names load nested relationships. Each call replaces the list
        set by the previous one.
        """
        names = normalize_names(relations, more)
        self._with = names or None
        return self

    def add_criteria(self, criterion: Criterion) -> SqlAlchemyRepository[T_Model]:
        self._criteria.append(criterion)
        return self

    def skip_criteria(self, status: bool = True) -> SqlAlchemyRepository[T_Model]:
        """Ignore stored criteria without removing them."""
        self._skip_criteria = bool(status)
        return self

    def is_skipping_criteria(self) -> bool:
        return self._skip_criteria

    def get_criteria(self) -> Tuple[Criterion, ...]:
        """Stored criteria in insertion order, whether applied or not."""
        return tuple(self._criteria)

    def set_current_page(self, page: int) -> SqlAlchemyRepository[T_Model]:
        """
        Select the page ``paginate`` returns from now on.

        Values below 1 are treated as the first page.
        """
        self._current_page = max(int(page), 1)
        return self

    def reset_scope(self) -> SqlAlchemyRepository[T_Model]:
        """Return to the state of a freshly built repository."""
        self._criteria = []
        self._skip_criteria = False
        self._with = None
        self._current_page = None
        self._query = self._base_query
        return self

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, data: Mapping[str, Any]) -> T_Model:
        """
        Create a new entity from the fillable keys of data.

        Args:
            data: Attribute values; keys missing from ``__fillable__`` are ignored

        Returns:
            The flushed and refreshed entity

        Raises:
            SQLAlchemyError: Propagated unchanged from the session
        """
        entity = self.model(**self._clean_unfillable_fields(data))
        try:
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)

        except IntegrityError as e:
            logger.warning(
                f"Integrity error in {self.model_name}.create(): {e.orig}",
                exc_info=False,
            )
            raise

        except SQLAlchemyError:
            logger.error(
                f"Database error in {self.model_name}.create()",
                exc_info=True,
            )
            raise

        return entity

    async def update_by(
        self, data: Mapping[str, Any], value: Any, field: str | None = None
    ) -> int:
        """
        Update every entity whose field equals value.

        Returns:
            Number of rows matched, 0 when data has no fillable keys
        """
        values = self._clean_unfillable_fields(data)
        if not values:
            logger.debug(f"{self.model_name}.update_by() called without fillable fields")
            return 0

        stmt = sa_update(self.model).where(self._column(field) == value).values(**values)
        if is_soft_deletable(self.model):
            stmt = stmt.where(self.model.deleted_at.is_(None))

        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError:
            logger.error(
                f"Database error in {self.model_name}.update_by({field or self.identity_field}={value!r})",
                exc_info=True,
            )
            raise

        return result.rowcount

    async def delete(self, value: Any, field: str | None = None) -> bool:
        """
        Delete every entity whose field equals value.

        Soft-deletable models get ``deleted_at`` stamped instead. The return
        value does not reflect how many rows matched.
        """
        column = self._column(field)
        if is_soft_deletable(self.model):
            stmt = (
                sa_update(self.model)
                .where(column == value, self.model.deleted_at.is_(None))
                .values(deleted_at=datetime.now(timezone.utc))
            )
        else:
            stmt = sa_delete(self.model).where(column == value)

        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError:
            logger.error(
                f"Database error in {self.model_name}.delete({column.key}={value!r})",
                exc_info=True,
            )
            raise

        logger.debug(f"{self.model_name}.delete({column.key}={value!r}) matched {result.rowcount} rows")
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _make_base_query(self) -> Select:
        stmt = select(self.model)
        if is_soft_deletable(self.model):
            stmt = stmt.where(self.model.deleted_at.is_(None))
        return stmt

    def _compose(self, *, eager: bool = True, apply_criteria: bool = True) -> Select:
        stmt = self._base_query
        if eager and self._with:
            stmt = QueryOptimizer.with_eager_load(stmt, *self._with)
        if apply_criteria and not self._skip_criteria:
            for criterion in self._criteria:
                stmt = criterion.apply(stmt)
        return stmt

    def _prepare(self, columns: Columns = None, *, apply_criteria: bool = True) -> Select:
        """Compose eager loads and criteria onto the base query and keep it as active."""
        stmt = QueryOptimizer.with_columns(
            self._compose(apply_criteria=apply_criteria), columns
        )
        self._query = stmt
        logger.debug(
            "%s query composed: %d criteria%s, eager=%s",
            self.model_name,
            len(self._criteria) if apply_criteria else 0,
            " (skipped)" if apply_criteria and self._skip_criteria else "",
            list(self.eager_loads),
        )
        return stmt

    def _column(self, field: str | None) -> InstrumentedAttribute:
        return QueryOptimizer.column(self.model, field or self.identity_field)

    def _clean_unfillable_fields(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        fillable = set(fillable_fields(self.model))
        return {key: value for key, value in data.items() if key in fillable}

    async def _first(self, stmt: Select) -> Optional[T_Model]:
        result = await self.session.execute(stmt.limit(1))
        return result.scalars().first()

    async def _all(self, stmt: Select) -> List[T_Model]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _scalar(self, stmt: Select) -> int:
        result = await self.session.execute(stmt)
        return result.scalar() or 0


__all__ = ["SqlAlchemyRepository", "T_Model"]
