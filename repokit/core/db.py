from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy import MetaData
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from repokit.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_async_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _engine_kwargs(settings: Settings) -> Dict[str, Any]:
    try:
        parsed = make_url(settings.database_url_async)
    except ArgumentError as exc:  # pragma: no cover - configuration guard
        raise RuntimeError(f"Invalid DATABASE_URL: {exc}") from exc

    driver = (parsed.drivername or "").lower()
    masked_url = parsed.render_as_string(hide_password=True)
    logger.info("Database dialect: %s (%s)", driver or "unknown", masked_url)

    kwargs: Dict[str, Any] = {"echo": settings.sql_echo, "future": True}
    if settings.is_sqlite:
        if not parsed.database or parsed.database == ":memory:":
            # One shared connection so every session sees the same database
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        return kwargs

    kwargs.update(
        {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_timeout": settings.db_pool_timeout,
            "pool_pre_ping": True,
            "pool_recycle": settings.db_pool_recycle,
        }
    )
    return kwargs


def get_async_engine() -> AsyncEngine:
    """Return the process-wide async engine, creating it on first use."""

    global _async_engine
    if _async_engine is None:
        settings = get_settings()
        _async_engine = create_async_engine(
            settings.database_url_async,
            **_engine_kwargs(settings),
        )
    return _async_engine


def _get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _async_session_factory
    if _async_session_factory is None:
        _async_session_factory = async_sessionmaker(
            bind=get_async_engine(),
            expire_on_commit=False,
            class_=AsyncSession,
        )
    return _async_session_factory


async def init_models(metadata: MetaData) -> None:
    """Create every table registered on ``metadata`` that does not exist yet."""

    engine = get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    logger.info("Database schema ready (%d tables)", len(metadata.tables))


def new_async_session() -> AsyncSession:
    """Return a raw AsyncSession instance."""
    return _get_session_factory()()


@asynccontextmanager
async def async_session() -> AsyncIterator[AsyncSession]:
    session = new_async_session()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""

    global _async_engine, _async_session_factory
    if _async_engine is not None:
        await _async_engine.dispose()
    _async_engine = None
    _async_session_factory = None


__all__ = [
    "async_session",
    "dispose_engine",
    "get_async_engine",
    "init_models",
    "new_async_session",
]
