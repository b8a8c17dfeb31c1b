"""
Logging configuration.

Builds a dictConfig dictionary with a console handler and, when a log file
is configured, a size-rotated file handler.
"""

import logging
import logging.config
import os
from typing import Optional, Dict, Any

from backend.app.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"


def build_logging_config(level: str, log_file: Optional[str] = None) -> Dict[str, Any]:
    """Return a logging.config.dictConfig compatible dictionary."""
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": level,
        },
    }

    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "filename": log_file,
            "maxBytes": settings.log_file_max_bytes,
            "backupCount": settings.log_file_backup_count,
            "level": level,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": LOG_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            "backend": {
                "handlers": list(handlers),
                "level": level,
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": logging.WARNING,
        },
    }


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Apply the application logging configuration."""
    level = (level or settings.log_level).upper()
    log_file = log_file if log_file is not None else settings.log_file

    if log_file:
        log_dir = os.path.dirname(os.path.abspath(log_file))
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

    logging.config.dictConfig(build_logging_config(level, log_file))
