"""
Criterion contract.

A criterion is a reusable query modifier with a single ``apply`` method that
takes a SQLAlchemy ``Select`` and returns a ``Select``. Repositories apply
their criteria in the order they were added.

Example:
    class ActiveOnly:
        def apply(self, query: Select) -> Select:
            model = QueryOptimizer.entity_of(query)
            return query.where(model.active.is_(True))

    repo.add_criteria(ActiveOnly()).add_criteria(OrderBy("name"))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from sqlalchemy.sql import Select


@runtime_checkable
class Criterion(Protocol):
    """Query modifier protocol."""

    def apply(self, query: Select) -> Select:
        """Return ``query`` with this criterion's constraint added."""
        ...


@dataclass(frozen=True)
class FunctionCriterion:
    """Adapts a plain ``Select -> Select`` function to the criterion protocol."""

    func: Callable[[Select], Select]

    def apply(self, query: Select) -> Select:
        return self.func(query)

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"FunctionCriterion({name})"


def criterion(func: Callable[[Select], Select]) -> FunctionCriterion:
    """
    Decorator turning a function into a criterion.

    Example:
        @criterion
        def published(query):
            return query.where(Book.published.is_(True))

        repo.add_criteria(published)
    """
    return FunctionCriterion(func)


__all__ = ["Criterion", "FunctionCriterion", "criterion"]
