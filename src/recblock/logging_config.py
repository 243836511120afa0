"""Logging configuration for recblock.

All recblock modules log through children of the ``recblock`` logger. By
default no handlers are configured, so applications decide where (and
whether) records of schema compilation and failed decodes appear.

Example:
    Enable debug output::

        import logging
        from recblock.logging_config import configure_logging

        configure_logging(level=logging.DEBUG)

Attributes:
    RECBLOCK_LOGGER_NAME: The name of the package logger ("recblock").
"""

from __future__ import annotations

import logging
from typing import Optional

RECBLOCK_LOGGER_NAME = "recblock"


def get_logger() -> logging.Logger:
    """Return the recblock package logger."""
    return logging.getLogger(RECBLOCK_LOGGER_NAME)


def configure_logging(
    level: int = logging.INFO,
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """Configure the recblock logger.

    A handler is only added if the logger has none yet, so calling this
    repeatedly does not duplicate output.

    Args:
        level: Logging level (e.g. ``logging.DEBUG``)
        format_string: Format for log messages
        handler: Handler to attach; a StreamHandler when omitted

    Returns:
        The configured logger
    """
    logger = get_logger()
    logger.setLevel(level)

    if not logger.handlers:
        if handler is None:
            handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(format_string))
        logger.addHandler(handler)

    return logger


def disable_logging() -> None:
    """Silence all recblock log output."""
    logger = get_logger()
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
