"""Tests for the Unit of Work."""

import pytest

from repokit.core.db import async_session
from repokit.core.uow import UnitOfWork, create_uow
from repokit.domain import RepositoryNotBoundError

import library_app
from library_app import AuthorRepository, AuthorRepositoryInterface, BookRepositoryInterface


@pytest.mark.asyncio
async def test_repositories_share_the_unit_session(app_db):
    async with UnitOfWork(registry=library_app.registry) as uow:
        authors = uow.repository(AuthorRepositoryInterface)
        books = uow.repository(BookRepositoryInterface)

        assert isinstance(authors, AuthorRepository)
        assert authors.session is uow.session
        assert books.session is uow.session
        assert uow.repository(AuthorRepositoryInterface) is authors


@pytest.mark.asyncio
async def test_commit_persists_across_repositories(app_db):
    async with UnitOfWork(registry=library_app.registry) as uow:
        author = await uow.repository(AuthorRepositoryInterface).create({"name": "Ursula"})
        await uow.repository(BookRepositoryInterface).create(
            {"title": "Earthsea", "author_id": author.id}
        )
        await uow.commit()

    async with UnitOfWork(registry=library_app.registry) as uow:
        books = await uow.repository(BookRepositoryInterface).with_relations("author").find_all()

    assert [(b.title, b.author.name) for b in books] == [("Earthsea", "Ursula")]


@pytest.mark.asyncio
async def test_nothing_persists_without_commit(app_db):
    async with UnitOfWork(registry=library_app.registry) as uow:
        await uow.repository(AuthorRepositoryInterface).create({"name": "Ghost"})
        await uow.flush()

    async with UnitOfWork(registry=library_app.registry) as uow:
        assert await uow.repository(AuthorRepositoryInterface).count() == 0


@pytest.mark.asyncio
async def test_exception_rolls_back(app_db):
    with pytest.raises(ValueError):
        async with UnitOfWork(registry=library_app.registry) as uow:
            await uow.repository(AuthorRepositoryInterface).create({"name": "Doomed"})
            raise ValueError("abort")

    async with UnitOfWork(registry=library_app.registry) as uow:
        assert await uow.repository(AuthorRepositoryInterface).find_one_by("Doomed", "name") is None


@pytest.mark.asyncio
async def test_external_session_is_left_open(app_db):
    async with async_session() as session:
        async with create_uow(session, library_app.registry) as uow:
            assert uow.session is session

        assert await library_app.AuthorRepository(session).count() == 0


@pytest.mark.asyncio
async def test_unbound_interface_raises(app_db):
    async with UnitOfWork(registry=library_app.registry) as uow:
        with pytest.raises(RepositoryNotBoundError):
            uow.repository(object)


def test_session_access_outside_context_raises():
    uow = UnitOfWork(registry=library_app.registry)

    with pytest.raises(RuntimeError):
        uow.session
