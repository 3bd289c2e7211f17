from __future__ import annotations

import logging
import logging.config
from typing import Iterable

from farmacia_reports.core.config import settings

LOG_DIR = settings.REPORTS_LOG_DIR


class AccessPathExcludeFilter(logging.Filter):
    """Drop uvicorn access records for noisy paths."""

    def __init__(self, excluded_paths: Iterable[str] = ()) -> None:
        super().__init__()
        self._excluded = tuple(excluded_paths)

    def filter(self, record: logging.LogRecord) -> bool:
        args = record.args
        if isinstance(args, tuple) and len(args) >= 3:
            path = str(args[2]).split("?", 1)[0]
            if path in self._excluded:
                return False
        return True


def configure_logging() -> None:
    """Configure application-wide logging with a rotating file handler."""

    logging.captureWarnings(True)
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    root_level = "DEBUG" if settings.REPORTS_DEBUG else "INFO"

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "filters": {
            "access_exclude": {
                "()": AccessPathExcludeFilter,
                "excluded_paths": ["/health"],
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "INFO",
                "formatter": "verbose",
            },
            "reports_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "DEBUG",
                "formatter": "verbose",
                "filename": str(LOG_DIR / "reports.log"),
                "maxBytes": 5 * 1024 * 1024,
                "backupCount": 5,
                "encoding": "utf-8",
            },
        },
        "loggers": {
            "": {
                "handlers": ["console", "reports_file"],
                "level": root_level,
            },
            "uvicorn.access": {
                "handlers": ["console", "reports_file"],
                "level": "INFO",
                "filters": ["access_exclude"],
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)


__all__ = ["configure_logging", "AccessPathExcludeFilter", "LOG_DIR"]
