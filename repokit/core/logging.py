from __future__ import annotations

import json
import logging
import logging.config
from pathlib import Path
from typing import Any, Dict


class JsonFormatter(logging.Formatter):
    """Simple JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info
        return json.dumps(payload, ensure_ascii=False)


_configured = False


def build_logging_config(settings) -> Dict[str, Any]:
    """Translate settings into a ``logging.config.dictConfig`` mapping."""

    log_level = getattr(settings, "log_level", "INFO") or "INFO"
    log_json = bool(getattr(settings, "log_json", False))
    log_file = getattr(settings, "log_file", "") or ""

    formatters = {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        },
        "json": {
            "()": "repokit.core.logging.JsonFormatter",
        },
    }
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": "json" if log_json else "standard",
        },
    }
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "json",
            "filename": log_file,
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": {
            "repokit": {"level": log_level},
            "sqlalchemy.engine": {
                "level": "INFO" if getattr(settings, "sql_echo", False) else "WARNING",
            },
        },
        "root": {
            "level": log_level,
            "handlers": list(handlers),
        },
    }


def configure_logging(settings=None, *, force: bool = False) -> None:
    """Configure application logging once per process."""

    global _configured
    if _configured and not force:
        return

    if settings is None:
        from repokit.core.settings import get_settings

        settings = get_settings()

    logging.config.dictConfig(build_logging_config(settings))
    logging.captureWarnings(True)
    _configured = True


__all__ = ["JsonFormatter", "build_logging_config", "configure_logging"]
