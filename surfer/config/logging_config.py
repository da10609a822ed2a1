from __future__ import annotations

import logging
import os
from logging import Logger
from logging.config import dictConfig
from typing import Any

# third-party loggers that are noisy at DEBUG
QUIET_LOGGERS = ("urllib3", "charset_normalizer")


def _surfer_logging_dict(level_name: str) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)-8s %(name)s - %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "default",
                "stream": "ext://sys.stderr",
            }
        },
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        "root": {
            "level": level_name,
            "handlers": ["console"],
        },
    }


def resolve_level(level_name: str | int | None) -> int:
    """Turn 'debug', 'INFO', 20 or None into a numeric level.

    None falls back to the `LOG_LEVEL` environment variable, then INFO.
    Unknown names resolve to INFO.
    """
    if level_name is None:
        level_name = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level_name, int):
        return level_name
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: str | int | None = None) -> None:
    """Configure console logging for a browsing session.

    Handlers accept everything; the root logger level decides what is
    emitted.
    """
    level = resolve_level(level_name)
    dictConfig(_surfer_logging_dict(logging.getLevelName(level)))
    logging.getLogger().setLevel(level)


def get_logger(name: str) -> Logger:
    """Return a module logger, e.g. `logger = get_logger(__name__)`."""
    return logging.getLogger(name)
