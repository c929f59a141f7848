import os
import tempfile

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

TEST_ENV = {
    "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
    "DATA_DIR": tempfile.mkdtemp(prefix="repokit-tests-"),
    "LOG_LEVEL": "DEBUG",
    "LOG_JSON": "0",
    "LOG_FILE": "",
    "REPOSITORY_PER_PAGE": "15",
    "REPOSITORY_SKIP": "",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value

from repokit.domain import Base  # noqa: E402

from library_app import Author, Book, Review  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_settings():
    """Force deterministic env for tests and reset cached settings."""

    for key, value in TEST_ENV.items():
        os.environ[key] = value

    from repokit.core import settings as settings_module

    settings_module.get_settings.cache_clear()
    yield
    settings_module.get_settings.cache_clear()


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database with the library schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed(session_factory):
    """Persist objects through a separate, committed session."""

    async def _seed(*objects):
        async with session_factory() as setup_session:
            setup_session.add_all(objects)
            await setup_session.commit()
        return objects

    return _seed


@pytest_asyncio.fixture
async def authors(seed):
    """Authors {1: a, 2: b, 3: a}."""
    return await seed(
        Author(id=1, name="a", email="one@example.com", rating=5),
        Author(id=2, name="b", email="two@example.com", rating=3),
        Author(id=3, name="a", email="three@example.com", rating=4),
    )


@pytest_asyncio.fixture
async def library(seed, authors):
    """Two books per author 1 and one for author 2, each with a review."""
    books = (
        Book(id=10, title="Dune", genre="sf", author_id=1),
        Book(id=11, title="Emma", genre="classic", author_id=1),
        Book(id=12, title="Solaris", genre="sf", author_id=2),
    )
    reviews = (
        Review(id=100, book_id=10, body="great", stars=5),
        Review(id=101, book_id=11, body="fine", stars=3),
        Review(id=102, book_id=12, body="odd", stars=4),
    )
    await seed(*books)
    await seed(*reviews)
    return books


@pytest_asyncio.fixture
async def app_db():
    """Schema on the process-wide engine from ``repokit.core.db``."""
    from repokit.core.db import dispose_engine, init_models

    await init_models(Base.metadata)
    yield
    await dispose_engine()
