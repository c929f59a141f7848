"""Ordering criterion."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.sql import Select

from repokit.core.query_optimization import QueryOptimizer

ASC = "asc"
DESC = "desc"


@dataclass(frozen=True)
class OrderBy:
    """
    Orders results by a single column.

    Args:
        field: Column name on the selected entity
        direction: "asc" or "desc", case-insensitive

    Example:
        repo.add_criteria(OrderBy("id", "desc"))
    """

    field: str
    direction: str = ASC

    def __post_init__(self) -> None:
        normalized = (self.direction or "").strip().lower()
        if normalized not in {ASC, DESC}:
            raise ValueError(
                f"Order direction must be 'asc' or 'desc', got {self.direction!r}"
            )
        object.__setattr__(self, "direction", normalized)

    def apply(self, query: Select) -> Select:
        model = QueryOptimizer.entity_of(query)
        column = QueryOptimizer.column(model, self.field)
        clause = column.desc() if self.direction == DESC else column.asc()
        return query.order_by(clause)


__all__ = ["ASC", "DESC", "OrderBy"]
