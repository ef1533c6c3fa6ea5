"""
Process-wide logging setup.

Call `configure_logging()` once at startup. Modules just use
`logging.getLogger(__name__)`.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.config import dictConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def log_level() -> str:
    level = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(level), int):
        return "INFO"
    return level


def configure_logging() -> None:
    level = log_level()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                    "stream": sys.stdout,
                }
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                "uvicorn": {"level": level, "handlers": ["console"], "propagate": False},
                "uvicorn.error": {"level": level, "handlers": ["console"], "propagate": False},
                "uvicorn.access": {"level": level, "handlers": ["console"], "propagate": False},
            },
        }
    )
