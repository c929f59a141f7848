from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional


def load_env(path: Optional[Path] = None) -> None:
    """
    Populate os.environ from dotenv files.

    Files are read in order:
    1. .env (shared defaults)
    2. .env.local (developer overrides, only when no explicit path is given)

    Variables exported by the shell always win over both files.
    """
    shell_keys = set(os.environ)

    env_path = path or _default_env_path()
    if env_path.exists():
        _apply(_parse(env_path), protected=shell_keys, override=False)

    if path is None:
        local_path = env_path.with_name(".env.local")
        if local_path.exists():
            _apply(_parse(local_path), protected=shell_keys, override=True)


def _parse(env_path: Path) -> Iterable[tuple[str, str]]:
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            yield key, _strip_quotes(value.strip())


def _apply(pairs: Iterable[tuple[str, str]], *, protected: set[str], override: bool) -> None:
    for key, value in pairs:
        if key in protected:
            continue
        if not override and key in os.environ:
            continue
        os.environ[key] = value


def _default_env_path() -> Path:
    return Path.cwd() / ".env"


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


__all__ = ["load_env"]
