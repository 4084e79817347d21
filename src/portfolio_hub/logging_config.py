"""Logging setup.

Console output always; when a log directory is configured, two daily
rotating files are added, one carrying only INFO records and one carrying
WARNING and above. Both keep 30 days of history.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Any

from portfolio_hub.config import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
RETAINED_DAYS = 30


class InfoOnlyFilter(logging.Filter):
    """Pass INFO records and nothing else."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno == logging.INFO


def build_logging_config(settings: Settings) -> dict[str, Any]:
    handlers: dict[str, dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    }

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers["info_file"] = {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "formatter": "default",
            "filename": str(log_dir / "info.log"),
            "when": "midnight",
            "backupCount": RETAINED_DAYS,
            "encoding": "utf-8",
            "filters": ["info_only"],
        }
        handlers["error_file"] = {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "formatter": "default",
            "filename": str(log_dir / "errors.log"),
            "when": "midnight",
            "backupCount": RETAINED_DAYS,
            "encoding": "utf-8",
            "level": "WARNING",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "filters": {"info_only": {"()": InfoOnlyFilter}},
        "handlers": handlers,
        "loggers": {
            "portfolio_hub": {
                "level": settings.log_level,
                "handlers": list(handlers),
                "propagate": False,
            },
        },
    }


def configure_logging(settings: Settings) -> None:
    """Apply the logging configuration for the ``portfolio_hub`` logger tree."""
    logging.config.dictConfig(build_logging_config(settings))
