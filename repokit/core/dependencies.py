"""FastAPI dependency injection for repositories.

Provides a per-request AsyncSession, a per-request UnitOfWork and
repository dependencies resolved through a ``RepositoryRegistry``.
"""

from typing import AsyncIterator, Callable, Type, TypeVar

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from repokit.core.db import new_async_session
from repokit.core.repository.registry import RepositoryRegistry, default_registry
from repokit.core.uow import UnitOfWork

I = TypeVar("I")


async def get_async_session() -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency to provide AsyncSession per request.

    Usage:
        @router.get("/authors")
        async def list_authors(session: AsyncSession = Depends(get_async_session)):
            ...

    Yields:
        AsyncSession instance for this request
    """
    session = new_async_session()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_uow(
    session: AsyncSession = Depends(get_async_session),
) -> AsyncIterator[UnitOfWork]:
    """
    FastAPI dependency to provide UnitOfWork per request.

    Usage:
        @router.post("/authors")
        async def create_author(data: AuthorIn, uow: UnitOfWork = Depends(get_uow)):
            author = await uow.repository(AuthorRepositoryInterface).create(data.model_dump())
            await uow.commit()
            return author

    No auto-commit: handlers call ``uow.commit()`` explicitly.
    """
    async with UnitOfWork(session=session) as uow:
        yield uow


def provide_repository(
    interface: Type[I],
    registry: RepositoryRegistry | None = None,
) -> Callable[..., I]:
    """
    Build a dependency that resolves interface for the request session.

    Usage:
        AuthorRepoDep = Depends(provide_repository(AuthorRepositoryInterface))

        @router.get("/authors/{author_id}")
        async def get_author(author_id: int, authors=AuthorRepoDep):
            return await authors.find_one_by(author_id)

    A fresh repository is built per request so scope never leaks between
    requests.
    """
    source = registry or default_registry

    def _dependency(session: AsyncSession = Depends(get_async_session)) -> I:
        return source.resolve(interface, session)

    _dependency.__name__ = f"provide_{getattr(interface, '__name__', 'repository')}"
    return _dependency


# Type aliases for dependency injection
AsyncSessionDep = Depends(get_async_session)
UnitOfWorkDep = Depends(get_uow)
