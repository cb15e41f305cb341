# app/utils/logger.py
"""
Logging for the booking service.

Console always; a size-rotated file as well unless LOG_DIR is empty.
Rotation and location come from settings so containers can log to
stdout only (LOG_DIR="") while on-prem installs keep a file history.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

_handlers: list[logging.Handler] = []


def configure_logging(level: str = None, log_dir: str = None) -> list[logging.Handler]:
    """
    (Re)install the service's handlers on the root logger.
    Safe to call again: handlers from an earlier call are replaced, not stacked.
    """
    level = (level or settings.LOG_LEVEL).upper()
    log_dir = settings.LOG_DIR if log_dir is None else log_dir

    root = logging.getLogger()
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    _handlers.append(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=os.path.join(log_dir, settings.LOG_FILE),
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(fmt)
        _handlers.append(file_handler)

    root.setLevel(level)
    for handler in _handlers:
        handler.setLevel(level)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return list(_handlers)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    if not _handlers:
        configure_logging()
    return logging.getLogger(name)
