"""Repository pattern implementation."""

from .base import SqlAlchemyRepository, T_Model
from .pagination import Page
from .protocols import RepositoryInterface
from .registry import RepositoryRegistry, build_registry, default_registry

__all__ = [
    "Page",
    "RepositoryInterface",
    "RepositoryRegistry",
    "SqlAlchemyRepository",
    "T_Model",
    "build_registry",
    "default_registry",
]
