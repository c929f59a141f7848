"""Repository pattern over async SQLAlchemy with composable query criteria."""

from repokit.core.repository import (
    Page,
    RepositoryInterface,
    RepositoryRegistry,
    SqlAlchemyRepository,
    build_registry,
    default_registry,
)
from repokit.core.uow import UnitOfWork
from repokit.criteria import Criterion, FunctionCriterion, OrderBy, Where, WhereIn, criterion
from repokit.domain import Base, SoftDeleteMixin

__version__ = "0.1.0"

__all__ = [
    "Base",
    "Criterion",
    "FunctionCriterion",
    "OrderBy",
    "Page",
    "RepositoryInterface",
    "RepositoryRegistry",
    "SoftDeleteMixin",
    "SqlAlchemyRepository",
    "UnitOfWork",
    "Where",
    "WhereIn",
    "build_registry",
    "criterion",
    "default_registry",
]
