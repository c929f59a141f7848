"""Model base classes and repository-layer errors."""

from .base import Base, SoftDeleteMixin, fillable_fields, is_soft_deletable
from .errors import (
    RepositoryBindingError,
    RepositoryError,
    RepositoryNotBoundError,
    UnknownFieldError,
    UnknownRelationError,
)

__all__ = [
    "Base",
    "SoftDeleteMixin",
    "fillable_fields",
    "is_soft_deletable",
    "RepositoryError",
    "RepositoryBindingError",
    "RepositoryNotBoundError",
    "UnknownFieldError",
    "UnknownRelationError",
]
