"""Filtering criteria."""

from __future__ import annotations

import operator
from dataclasses import dataclass, field as dc_field
from typing import Any, Callable, Dict, Tuple

from sqlalchemy.sql import Select

from repokit.core.query_optimization import QueryOptimizer

_OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "like": lambda column, value: column.like(value),
}


@dataclass(frozen=True)
class Where:
    """
    Compares one column with a value.

    ``None`` compared with ``==`` or ``!=`` renders ``IS NULL`` /
    ``IS NOT NULL``.

    Example:
        repo.add_criteria(Where("rating", 4, ">="))
    """

    field: str
    value: Any
    operator: str = "=="

    def __post_init__(self) -> None:
        if self.operator not in _OPERATORS:
            raise ValueError(
                f"Unsupported operator {self.operator!r}; "
                f"expected one of {sorted(_OPERATORS)}"
            )

    def apply(self, query: Select) -> Select:
        model = QueryOptimizer.entity_of(query)
        column = QueryOptimizer.column(model, self.field)
        return query.where(_OPERATORS[self.operator](column, self.value))


@dataclass(frozen=True)
class WhereIn:
    """Keeps rows whose column value is one of ``values``."""

    field: str
    values: Tuple[Any, ...] = dc_field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))

    def apply(self, query: Select) -> Select:
        model = QueryOptimizer.entity_of(query)
        column = QueryOptimizer.column(model, self.field)
        return query.where(column.in_(self.values))


__all__ = ["Where", "WhereIn"]
