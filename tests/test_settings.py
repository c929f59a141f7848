"""Tests for environment-driven settings and dotenv loading."""

import os

import pytest

from repokit.core import settings as settings_module
from repokit.core.env import load_env
from repokit.core.settings import DEFAULT_PER_PAGE, get_settings


@pytest.fixture
def fresh_settings(monkeypatch):
    def _load(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        settings_module.get_settings.cache_clear()
        return get_settings()

    return _load


def test_test_database_defaults(fresh_settings):
    settings = fresh_settings()

    assert settings.database_url_async == "sqlite+aiosqlite:///:memory:"
    assert settings.is_sqlite
    assert settings.default_per_page == DEFAULT_PER_PAGE
    assert settings.repository_skip == ()


def test_settings_are_cached(fresh_settings):
    first = fresh_settings()
    assert get_settings() is first


def test_default_database_lives_in_data_dir(fresh_settings, monkeypatch, tmp_path):
    monkeypatch.delenv("DATABASE_URL")

    settings = fresh_settings(DATA_DIR=str(tmp_path / "data"))

    assert settings.database_url_async == f"sqlite+aiosqlite:///{tmp_path / 'data' / 'repokit.db'}"
    assert (tmp_path / "data").is_dir()


@pytest.mark.parametrize(
    "raw, async_url",
    [
        ("postgresql+asyncpg://u:p@db:5432/app", "postgresql+asyncpg://u:p@db:5432/app"),
        ("postgresql://u:p@db:5432/app", "postgresql+asyncpg://u:p@db:5432/app"),
        ("postgres://u:p@db:5432/app", "postgresql+asyncpg://u:p@db:5432/app"),
        ("sqlite:///tmp/x.db", "sqlite+aiosqlite:///tmp/x.db"),
        ("sqlite://", "sqlite+aiosqlite://"),
    ],
)
def test_database_url_uses_async_driver(fresh_settings, raw, async_url):
    settings = fresh_settings(DATABASE_URL=raw)

    assert settings.database_url_async == async_url
    assert settings.is_sqlite == raw.startswith("sqlite")


def test_numeric_values_fall_back_on_garbage(fresh_settings):
    settings = fresh_settings(
        REPOSITORY_PER_PAGE="lots",
        DB_POOL_SIZE="0",
        DB_POOL_RECYCLE="10",
        DB_MAX_OVERFLOW="5",
    )

    assert settings.default_per_page == DEFAULT_PER_PAGE
    assert settings.db_pool_size == 20
    assert settings.db_pool_recycle == 3600
    assert settings.db_max_overflow == 5


def test_repository_skip_is_split_and_trimmed(fresh_settings):
    settings = fresh_settings(REPOSITORY_SKIP=" BaseRepositoryInterface, ,AuditRepositoryInterface ")

    assert settings.repository_skip == ("BaseRepositoryInterface", "AuditRepositoryInterface")


def test_logging_flags(fresh_settings):
    settings = fresh_settings(LOG_LEVEL="warning", LOG_JSON="yes", SQL_ECHO="true")

    assert settings.log_level == "WARNING"
    assert settings.log_json is True
    assert settings.sql_echo is True


def test_load_env_respects_shell_and_local_overrides(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\n"
        "REPOKIT_A=from-env\n"
        "REPOKIT_B='quoted'\n"
        "export REPOKIT_C=exported\n"
        "REPOKIT_SHELL=from-file\n"
        "not a pair\n",
        encoding="utf-8",
    )
    (tmp_path / ".env.local").write_text(
        "REPOKIT_A=from-local\nREPOKIT_SHELL=from-local\n", encoding="utf-8"
    )
    for key in ("REPOKIT_A", "REPOKIT_B", "REPOKIT_C"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("REPOKIT_SHELL", "from-shell")
    monkeypatch.chdir(tmp_path)

    load_env()

    assert os.environ["REPOKIT_A"] == "from-local"
    assert os.environ["REPOKIT_B"] == "quoted"
    assert os.environ["REPOKIT_C"] == "exported"
    assert os.environ["REPOKIT_SHELL"] == "from-shell"
    for key in ("REPOKIT_A", "REPOKIT_B", "REPOKIT_C"):
        monkeypatch.delenv(key)


def test_load_env_explicit_path_skips_local_file(tmp_path, monkeypatch):
    env_file = tmp_path / "custom.env"
    env_file.write_text("REPOKIT_ONLY=custom\n", encoding="utf-8")
    (tmp_path / ".env.local").write_text("REPOKIT_ONLY=local\n", encoding="utf-8")
    monkeypatch.delenv("REPOKIT_ONLY", raising=False)

    load_env(env_file)

    assert os.environ["REPOKIT_ONLY"] == "custom"
    monkeypatch.delenv("REPOKIT_ONLY")


def test_engine_pool_arguments_only_for_server_databases(fresh_settings):
    from repokit.core.db import _engine_kwargs

    memory = _engine_kwargs(fresh_settings())
    server = _engine_kwargs(fresh_settings(DATABASE_URL="postgresql://u:p@db:5432/app"))

    assert "pool_size" not in memory
    assert memory["connect_args"] == {"check_same_thread": False}
    assert server["pool_size"] == 20
    assert server["pool_pre_ping"] is True
    assert "connect_args" not in server
