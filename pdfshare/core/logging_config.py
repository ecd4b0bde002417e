"""
Logging Configuration Module.

Central logging setup for the pdfshare server. Everything is built as a
``logging.config.dictConfig`` document:

- one console handler whose level follows ``PDFSHARE_LOG_LEVEL``
- an optional ``pdfshare.log`` file handler (``ENABLE_FILE_LOGGING``)
- ``simple``, ``detailed`` or ``json`` line formats (``LOG_FORMAT``)
- a per-logger level table that keeps database and AWS chatter down
"""

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, Optional

from pdfshare.server.core.config import settings

LOG_LEVEL = settings.log_level.upper()
LOG_FORMAT = settings.log_format
LOG_FILE_DIR = settings.log_file_dir
ENABLE_FILE_LOGGING = settings.enable_file_logging

LOG_FILE_NAME = "pdfshare.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

_FORMATS = {"simple": SIMPLE_FORMAT, "detailed": DETAILED_FORMAT, "json": JSON_FORMAT}

MODULE_LOG_LEVELS = {
    "pdfshare.core": "INFO",
    "pdfshare.core.database": "INFO",
    "pdfshare.core.cache": "INFO",
    "pdfshare.core.storage": "INFO",
    "pdfshare.core.mailer": "INFO",
    "pdfshare.server": "INFO",
    "pdfshare.server.api": "DEBUG",
    "pdfshare.server.services": "DEBUG",
    # third party
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "httpx": "WARNING",
    "asyncio": "WARNING",
    "botocore": "WARNING",
    "boto3": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def build_logging_config(level: str, fmt: str, log_file: Optional[Path] = None) -> Dict[str, Any]:
    """Return the ``dictConfig`` document for the given console level and format."""
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "default",
        }
    }
    if log_file is not None:
        # the file keeps everything regardless of the console level
        handlers["file"] = {
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "formatter": "default",
            "filename": str(log_file),
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": _FORMATS.get(fmt, DETAILED_FORMAT), "datefmt": DATE_FORMAT},
        },
        "handlers": handlers,
        "root": {"level": "DEBUG", "handlers": list(handlers)},
        "loggers": {name: {"level": module_level} for name, module_level in MODULE_LOG_LEVELS.items()},
    }


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
) -> None:
    """
    Configure logging for the application.

    Calling it again replaces the previous handlers.

    Args:
        log_level: Console level override (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format override (simple, detailed, json)
        enable_file: Allow the file handler; it is only added when ENABLE_FILE_LOGGING is on too
    """
    level = (log_level or LOG_LEVEL).upper()
    fmt = log_format or LOG_FORMAT

    log_file: Optional[Path] = None
    if enable_file and ENABLE_FILE_LOGGING:
        log_dir = Path(LOG_FILE_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / LOG_FILE_NAME

    logging.config.dictConfig(build_logging_config(level, fmt, log_file))
    logging.getLogger(__name__).info(
        f"Logging configured: level={level}, format={fmt}, file_logging={log_file is not None}"
    )


def get_logger(name: str) -> logging.Logger:
    """Return the module logger; use ``get_logger(__name__)``."""
    return logging.getLogger(name)
