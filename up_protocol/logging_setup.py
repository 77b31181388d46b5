"""Central logging configuration.

Applies a root stdout handler so the ``up_protocol.*`` loggers emit without
per-module setup. Keeps uvicorn loggers visible and avoids duplicate handlers
on reloads.
"""
from __future__ import annotations
import logging
from logging.config import dictConfig

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
        "up_protocol": {"level": "INFO"},
        "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
    },
}


def configure_logging(level: str | None = None) -> None:
    """Configure application-wide logging once.

    If the root logger already has handlers, return to prevent duplicate output
    (important under reloaders and test runners). ``level`` overrides the
    ``up_protocol`` logger level.
    """
    root = logging.getLogger()
    if root.handlers:
        if level:
            logging.getLogger("up_protocol").setLevel(level.upper())
        return
    dictConfig(_DICT_CONFIG)
    if level:
        logging.getLogger("up_protocol").setLevel(level.upper())


__all__ = ["configure_logging"]
