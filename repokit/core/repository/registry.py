"""
Explicit interface-to-implementation registry for repositories.

Bindings are declared in code at import time instead of being discovered by
scanning the filesystem. Every binding maps an interface class to a factory
that receives the session and returns a repository.

Example:
    registry = RepositoryRegistry()

    @registry.implements(AuthorRepositoryInterface)
    class AuthorRepository(SqlAlchemyRepository[Author]):
        def __init__(self, session: AsyncSession):
            super().__init__(Author, session)

    repo = registry.resolve(AuthorRepositoryInterface, session)
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Set, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from repokit.domain.errors import RepositoryBindingError, RepositoryNotBoundError

logger = logging.getLogger(__name__)

I = TypeVar("I")
C = TypeVar("C", bound=type)

RepositoryFactory = Callable[[AsyncSession], Any]


def _interface_members(interface: type) -> Set[str]:
    """Public callables an interface declares, typing plumbing excluded."""
    names: Set[str] = set()
    for klass in interface.__mro__:
        if klass is object or klass.__module__ == "typing":
            continue
        for name, member in vars(klass).items():
            if not name.startswith("_") and callable(member):
                names.add(name)
    return names


class RepositoryRegistry:
    """
    Maps repository interfaces to factories.

    Args:
        skip: Interface names (``__name__``) that must never be bound. Binding
            a skipped interface is a silent no-op, mirroring the skip list of
            the configuration.
    """

    def __init__(self, skip: Iterable[str] = ()):
        self._bindings: Dict[type, RepositoryFactory] = {}
        self._skip = frozenset(skip)

    @property
    def skipped(self) -> frozenset[str]:
        return self._skip

    def bind(self, interface: Type[I], factory: Callable[[AsyncSession], I]) -> None:
        """
        Bind an interface to a factory, replacing any previous binding.

        Raises:
            RepositoryBindingError: If interface is not a class, factory is not
                callable, or a factory class lacks methods the interface declares
        """
        if not isinstance(interface, type):
            raise RepositoryBindingError(interface, "interface must be a class")
        if not callable(factory):
            raise RepositoryBindingError(interface, "factory must be callable")

        if interface.__name__ in self._skip:
            logger.debug("Skipping repository binding for %s", interface.__name__)
            return

        if isinstance(factory, type):
            missing = sorted(
                name for name in _interface_members(interface) if not hasattr(factory, name)
            )
            if missing:
                raise RepositoryBindingError(
                    interface,
                    f"{factory.__name__} does not implement {', '.join(missing)}",
                )

        if interface in self._bindings:
            logger.debug("Rebinding repository interface %s", interface.__name__)
        self._bindings[interface] = factory
        logger.debug(
            "Bound %s -> %s",
            interface.__name__,
            getattr(factory, "__qualname__", repr(factory)),
        )

    def implements(self, interface: type) -> Callable[[C], C]:
        """Class decorator binding the decorated repository class to interface."""

        def decorator(cls: C) -> C:
            self.bind(interface, cls)
            return cls

        return decorator

    def bind_all(self, bindings: Mapping[type, RepositoryFactory]) -> None:
        for interface, factory in bindings.items():
            self.bind(interface, factory)

    def unbind(self, interface: type) -> None:
        self._bindings.pop(interface, None)

    def is_bound(self, interface: type) -> bool:
        return interface in self._bindings

    def bindings(self) -> Mapping[type, RepositoryFactory]:
        """Read-only view of the current bindings."""
        return MappingProxyType(self._bindings)

    def resolve(self, interface: Type[I], session: AsyncSession) -> I:
        """
        Build a new repository for interface on session.

        Raises:
            RepositoryNotBoundError: If nothing is bound to interface
        """
        try:
            factory = self._bindings[interface]
        except KeyError:
            raise RepositoryNotBoundError(interface) from None
        return factory(session)


def build_registry(
    bindings: Optional[Mapping[type, RepositoryFactory]] = None,
    skip: Optional[Iterable[str]] = None,
) -> RepositoryRegistry:
    """Create a registry honoring the configured skip list."""
    if skip is None:
        from repokit.core.settings import get_settings

        skip = get_settings().repository_skip

    registry = RepositoryRegistry(skip=skip)
    if bindings:
        registry.bind_all(bindings)
    return registry


default_registry = build_registry()


__all__ = [
    "RepositoryFactory",
    "RepositoryRegistry",
    "build_registry",
    "default_registry",
]
