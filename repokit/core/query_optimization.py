"""Statement helpers shared by repositories and criteria.

This module provides:
- Column and relationship lookup by name
- Eager loading by dotted relationship path
- Column restriction that keeps ORM entities
- Count statements derived from a composed select
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from sqlalchemy import func, inspect as sa_inspect, select
from sqlalchemy.orm import load_only, selectinload
from sqlalchemy.orm.attributes import InstrumentedAttribute
from sqlalchemy.sql import Select

from repokit.domain.errors import UnknownFieldError, UnknownRelationError

logger = logging.getLogger(__name__)

ALL_COLUMNS = "*"


class QueryOptimizer:
    """
    Helper for building SQLAlchemy select statements from plain names.

    Field and relationship names arrive as strings from callers. They are
    resolved against the mapped class here so that a typo surfaces as
    ``UnknownFieldError`` or ``UnknownRelationError`` instead of a bare
    ``AttributeError`` deep inside SQLAlchemy.
    """

    @staticmethod
    def entity_of(stmt: Select) -> type:
        """Return the mapped class a ``select(Model)`` statement targets."""
        descriptions = stmt.column_descriptions
        if not descriptions or descriptions[0].get("entity") is None:
            raise TypeError("Statement does not select a mapped entity")
        return descriptions[0]["entity"]

    @staticmethod
    def column(model: type, field: str) -> InstrumentedAttribute:
        """
        Resolve a column attribute by name.

        Args:
            model: Mapped class
            field: Attribute name

        Returns:
            The instrumented column attribute

        Raises:
            UnknownFieldError: If the model maps no column with that name
        """
        mapper = sa_inspect(model)
        if field not in mapper.column_attrs:
            raise UnknownFieldError(model.__name__, field)
        return getattr(model, field)

    @staticmethod
    def primary_key_name(model: type) -> str | None:
        """Attribute name of a single-column primary key, None for composite keys."""
        mapper = sa_inspect(model)
        if len(mapper.primary_key) != 1:
            return None
        return mapper.get_property_by_column(mapper.primary_key[0]).key

    @staticmethod
    def relationship(model: type, name: str) -> InstrumentedAttribute:
        mapper = sa_inspect(model)
        if name not in mapper.relationships:
            raise UnknownRelationError(model.__name__, name)
        return getattr(model, name)

    @staticmethod
    def with_eager_load(stmt: Select, *relationships: str) -> Select:
        """
        Add select-in eager loading to query.

        Args:
            stmt: SQLAlchemy select statement
            *relationships: Relationship names to load

        Returns:
            Statement with eager loading applied

        Example:
            stmt = select(Author)
            stmt = QueryOptimizer.with_eager_load(stmt, "books", "books.reviews")
        """
        root = QueryOptimizer.entity_of(stmt)

        for path in relationships:
            # "books.reviews" loads books, then their reviews
            parts = path.split(".")
            attr = QueryOptimizer.relationship(root, parts[0])
            loader = selectinload(attr)
            current = attr.property.mapper.class_

            for part in parts[1:]:
                attr = QueryOptimizer.relationship(current, part)
                loader = loader.selectinload(attr)
                current = attr.property.mapper.class_

            stmt = stmt.options(loader)

        return stmt

    @staticmethod
    def with_columns(stmt: Select, columns: Sequence[str] | None) -> Select:
        """
        Restrict loaded columns while still returning ORM entities.

        ``None`` or a list containing ``"*"`` leaves the statement untouched.
        The primary key is always loaded by SQLAlchemy.
        """
        if not columns or ALL_COLUMNS in columns:
            return stmt
        model = QueryOptimizer.entity_of(stmt)
        attrs = [QueryOptimizer.column(model, name) for name in columns]
        return stmt.options(load_only(*attrs))

    @staticmethod
    def count_statement(stmt: Select) -> Select:
        """Wrap a select in ``SELECT count(*)``, dropping ordering and paging."""
        inner = stmt.order_by(None).limit(None).offset(None)
        return select(func.count()).select_from(inner.subquery())


def normalize_names(first: Any, rest: Iterable[str] = ()) -> tuple[str, ...]:
    """
    Accept ``"a"``, ``("a", "b")`` varargs or ``["a", "b"]``.

    Raises:
        TypeError: If any resulting name is not a string
    """
    if first is None:
        return ()
    if isinstance(first, str):
        names: tuple = (first, *rest)
    else:
        names = (*first, *rest)

    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"Relation names must be strings, got {type(name).__name__}: {name!r}")
    return names


__all__ = ["ALL_COLUMNS", "QueryOptimizer", "normalize_names"]
