"""Logging bootstrap.

The interactive session owns the terminal, so records only ever go to a
rotating log file, or nowhere when file logging is off.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

LOGGER_NAME = "codescroller"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


def setup_logging(log_file: Path | None = None, level: int = logging.DEBUG) -> logging.Logger:
    """Configure the package logger and return it.

    Existing handlers are closed and replaced, so calling this twice is safe.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    if log_file is None:
        logger.addHandler(logging.NullHandler())
        return logger

    resolved = Path(log_file).expanduser().resolve()
    os.makedirs(resolved.parent, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        resolved,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)
    return logger
