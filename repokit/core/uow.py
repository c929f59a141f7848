"""
Unit of Work pattern implementation for transaction management.

The Unit of Work owns one session and hands out repositories bound to it, so
that writes made through several repositories commit or roll back together.

Example:
    async with UnitOfWork() as uow:
        authors = uow.repository(AuthorRepositoryInterface)
        books = uow.repository(BookRepositoryInterface)

        author = await authors.create({"name": "Ursula"})
        await books.create({"title": "Earthsea", "author_id": author.id})

        # Nothing is persisted until commit
        await uow.commit()
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Dict, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from repokit.core.db import new_async_session
from repokit.core.repository.registry import RepositoryRegistry, default_registry

logger = logging.getLogger(__name__)

I = TypeVar("I")


class UnitOfWork:
    """
    Unit of Work for coordinating repository operations.

    Repositories are resolved lazily from the registry and cached per
    interface for the lifetime of the unit of work.
    """

    def __init__(
        self,
        session: AsyncSession | None = None,
        registry: RepositoryRegistry | None = None,
    ):
        """
        Initialize Unit of Work.

        Args:
            session: Optional existing session. If not provided, creates new one.
            registry: Registry to resolve repositories from, the default one otherwise.
        """
        self._session = session
        self._should_close = session is None
        self._registry = registry or default_registry
        self._repositories: Dict[type, Any] = {}

    async def __aenter__(self) -> UnitOfWork:
        if self._session is None:
            self._session = new_async_session()
        return self

    async def __aexit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """
        Exit async context.

        Rolls back on exception. Never commits on its own.
        """
        try:
            if exc_type is not None and self._session is not None:
                await self.rollback()
                logger.warning(
                    f"Transaction rolled back due to {exc_type.__name__}: {exc_val}"
                )
        finally:
            self._repositories.clear()
            if self._should_close and self._session is not None:
                await self._session.close()
                self._session = None

    @property
    def session(self) -> AsyncSession:
        """
        Get the current database session.

        Raises:
            RuntimeError: If session not initialized
        """
        if self._session is None:
            raise RuntimeError("Session not initialized. Use async with UnitOfWork().")
        return self._session

    @property
    def registry(self) -> RepositoryRegistry:
        return self._registry

    def repository(self, interface: Type[I]) -> I:
        """
        Return the repository bound to interface, sharing this unit's session.

        Raises:
            RuntimeError: If session not initialized
            RepositoryNotBoundError: If the registry has no binding for interface
        """
        if interface not in self._repositories:
            self._repositories[interface] = self._registry.resolve(interface, self.session)
        return self._repositories[interface]

    async def commit(self) -> None:
        """
        Commit the current transaction.

        Raises:
            RuntimeError: If session not initialized
        """
        try:
            await self.session.commit()
            logger.debug("Transaction committed successfully")
        except Exception as e:
            logger.error(f"Error committing transaction: {e}", exc_info=True)
            await self.rollback()
            raise

    async def rollback(self) -> None:
        try:
            await self.session.rollback()
            logger.debug("Transaction rolled back")
        except Exception as e:
            logger.error(f"Error rolling back transaction: {e}", exc_info=True)
            raise

    async def flush(self) -> None:
        """Flush pending changes to database without committing."""
        await self.session.flush()


def create_uow(
    session: AsyncSession | None = None,
    registry: RepositoryRegistry | None = None,
) -> UnitOfWork:
    """Factory function to create Unit of Work."""
    return UnitOfWork(session, registry)


__all__ = ["UnitOfWork", "create_uow"]
