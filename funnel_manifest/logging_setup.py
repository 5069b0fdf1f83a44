"""Central logging configuration for the application.

Applies a root stdout handler so module loggers emit without per-module
setup. Keeps uvicorn loggers visible and avoids duplicate handlers on
reloads.
"""
from __future__ import annotations
import copy
import logging
from logging.config import dictConfig
from typing import Optional

_DICT_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "default",
            "stream": "ext://sys.stdout",
        }
    },
    "root": {"level": "INFO", "handlers": ["console"]},
    "loggers": {
        "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
    },
}


def build_logging_config(level: str = "INFO") -> dict:
    cfg = copy.deepcopy(_DICT_CONFIG)
    cfg["handlers"]["console"]["level"] = level
    cfg["root"]["level"] = level
    return cfg


def configure_logging(level: Optional[str] = None) -> None:
    """Configure application-wide logging once.

    If the root logger already has handlers, return to prevent duplicate
    output (important under reloaders/watchers).
    """
    root = logging.getLogger()
    if root.handlers:
        return
    dictConfig(build_logging_config((level or "INFO").upper()))
