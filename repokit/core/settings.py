from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from repokit.core.env import load_env


DEFAULT_DATA_DIR = Path.home() / ".repokit" / "data"
DEFAULT_PER_PAGE = 15


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    database_url_async: str
    sql_echo: bool
    log_level: str
    log_json: bool
    log_file: str
    db_pool_size: int
    db_max_overflow: int
    db_pool_timeout: int
    db_pool_recycle: int
    default_per_page: int
    repository_skip: Tuple[str, ...]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url_async.startswith("sqlite")


def _get_int(name: str, default: int, *, minimum: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except (TypeError, ValueError):
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _get_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(name: str) -> Tuple[str, ...]:
    raw = os.getenv(name, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


load_env()


def _default_data_dir() -> Path:
    env_dir = os.getenv("DATA_DIR")
    if env_dir and env_dir.strip():
        return Path(env_dir).expanduser()
    return DEFAULT_DATA_DIR


def _normalize_sqlite_url(url: str) -> str:
    prefix = "sqlite+aiosqlite"
    if "///" not in url:
        # sqlite:// and sqlite+aiosqlite:// both mean an in-memory database
        return f"{prefix}://"
    path = url.split("///", maxsplit=1)[-1]
    return f"{prefix}:///{path}"


def _async_url(raw_db_url: str) -> str:
    """Return the async-driver form of the configured DATABASE_URL."""
    if raw_db_url.startswith("sqlite"):
        return _normalize_sqlite_url(raw_db_url)
    if raw_db_url.startswith("postgresql+asyncpg"):
        return raw_db_url
    if raw_db_url.startswith("postgresql://") or raw_db_url.startswith("postgres://"):
        base = raw_db_url.split("://", 1)[1]
        return f"postgresql+asyncpg://{base}"
    return raw_db_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = _default_data_dir()

    raw_db_url = (os.getenv("DATABASE_URL") or "").strip()
    if not raw_db_url:
        raw_db_url = f"sqlite+aiosqlite:///{data_dir / 'repokit.db'}"
    if raw_db_url.startswith("sqlite") and "///" in raw_db_url and ":memory:" not in raw_db_url:
        data_dir.mkdir(parents=True, exist_ok=True)

    async_url = _async_url(raw_db_url)

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    log_json = _get_bool("LOG_JSON", default=False)
    log_file = os.getenv("LOG_FILE", "").strip()

    return Settings(
        data_dir=data_dir,
        database_url_async=async_url,
        sql_echo=_get_bool("SQL_ECHO", default=False),
        log_level=log_level,
        log_json=log_json,
        log_file=log_file,
        db_pool_size=_get_int("DB_POOL_SIZE", 20, minimum=1),
        db_max_overflow=_get_int("DB_MAX_OVERFLOW", 10, minimum=0),
        db_pool_timeout=_get_int("DB_POOL_TIMEOUT", 30, minimum=1),
        db_pool_recycle=_get_int("DB_POOL_RECYCLE", 3600, minimum=60),
        default_per_page=_get_int("REPOSITORY_PER_PAGE", DEFAULT_PER_PAGE, minimum=1),
        repository_skip=_get_list("REPOSITORY_SKIP"),
    )


__all__ = ["Settings", "get_settings", "DEFAULT_PER_PAGE"]
