"""Logging setup shared by the server and the client."""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with a single stream handler attached.

    Args:
        name: Logger name, usually the module's ``__name__``
        level: Log level name. Defaults to the ``LOG_LEVEL`` environment variable.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
