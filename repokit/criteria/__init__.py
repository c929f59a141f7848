"""Reusable query criteria."""

from .base import Criterion, FunctionCriterion, criterion
from .order_by import ASC, DESC, OrderBy
from .where import Where, WhereIn

__all__ = [
    "ASC",
    "DESC",
    "Criterion",
    "FunctionCriterion",
    "OrderBy",
    "Where",
    "WhereIn",
    "criterion",
]
