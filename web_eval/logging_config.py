"""Logging setup for the command-line executor."""

from __future__ import annotations

import logging
import os
from logging import Logger
from logging.config import dictConfig
from typing import Any


def _logging_dict(level_name: str) -> dict[str, Any]:
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
        "root": {
            "level": level_name,
            "handlers": ["console"],
        },
    }


def configure_logging(level_name: str | int | None = None) -> None:
    """Configure root logging on stderr so stdout stays free for the JSON result.

    ``level_name`` falls back to ``LOG_LEVEL``, then INFO.
    """
    if level_name is None:
        level_name = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level_name, str):
        level = getattr(logging, level_name.strip().upper(), logging.INFO)
    else:
        level = level_name
    if not isinstance(level, int):
        level = logging.INFO
    dictConfig(_logging_dict(logging.getLevelName(level)))
    logging.getLogger().setLevel(level)


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)
