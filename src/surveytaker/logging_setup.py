"""Logging setup for hosts that embed the survey taker.

Every module logs through `logging.getLogger(__name__)` with terse
`event key=value` records (load_start, submit_failed, phase_change, ...).
The `surveytaker` logger carries the configured level so a host can turn
session tracing up to DEBUG without making its own loggers noisy. A host
that already configured logging keeps its handlers untouched.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig

PACKAGE_LOGGER = "surveytaker"


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "session": {
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            }
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "session",
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            PACKAGE_LOGGER: {"level": level},
        },
        "root": {"level": "WARNING", "handlers": ["stdout"]},
    }


def configure_logging(level: str = "INFO") -> None:
    """Attach a stdout handler and set the survey taker's log level.

    No-op when the root logger already has handlers, except that the
    `surveytaker` level is still applied.
    """
    root = logging.getLogger()
    if root.handlers:
        logging.getLogger(PACKAGE_LOGGER).setLevel(level)
        return
    dictConfig(_dict_config(level))
