"""
Logging for the pipeline.

Handlers live on the ``pipeline`` logger only; every module logger returned
by ``get_logger(__name__)`` is a child of it (``pipeline.core.translator``)
and propagates there.

Environment overrides:
    LOG_LEVEL: level of the ``pipeline`` logger (default from constants)
    LOG_FILE: rotating log file path; empty string disables the file handler
"""
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

from .constants import (
    LOG_LEVEL, LOG_FORMAT, LOG_FILE,
    LOG_MAX_SIZE_MB, LOG_BACKUP_COUNT
)

ROOT_LOGGER_NAME = 'pipeline'

# SDK and HTTP client chatter (one line per request) stays out of the pipeline log
NOISY_LOGGERS = ('httpx', 'httpcore', 'openai', 'anthropic')


def setup_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the ``pipeline`` logger once and return it.

    Console output is INFO and above; the rotating file gets everything
    down to DEBUG.

    Args:
        level: Logger level name. Defaults to $LOG_LEVEL, then LOG_LEVEL.
        log_file: File path. Defaults to $LOG_FILE, then LOG_FILE.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.handlers:
        return root

    level = (level or os.getenv('LOG_LEVEL') or LOG_LEVEL).upper()
    root.setLevel(getattr(logging, level, logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(formatter)
    root.addHandler(console)

    log_file = log_file if log_file is not None else os.getenv('LOG_FILE', LOG_FILE)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_MAX_SIZE_MB * 1024 * 1024,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Logger for a module, under the configured ``pipeline`` hierarchy.

    Usage:
        from config.logging_config import get_logger
        logger = get_logger(__name__)
    """
    root = setup_logger()
    if not name or name == ROOT_LOGGER_NAME:
        return root
    return root.getChild(name)


logger = setup_logger()
