"""Unit tests for logging configuration."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator

import pytest

from recblock import Record, has_one
from recblock.logging_config import (
    RECBLOCK_LOGGER_NAME,
    configure_logging,
    disable_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def restore_logger() -> Iterator[None]:
    """Put the package logger back the way the test found it."""
    logger = logging.getLogger(RECBLOCK_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    logger.handlers.clear()
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


class TestLoggingConfig:
    """Test logging helpers."""

    def test_get_logger(self) -> None:
        """Test the package logger name."""
        assert get_logger().name == "recblock"

    def test_configure_logging(self) -> None:
        """Test schema compilation is logged at debug level."""
        stream = io.StringIO()
        configure_logging(level=logging.DEBUG, handler=logging.StreamHandler(stream))

        class Logged(Record):
            value = has_one("int16")

        assert "Compiled record type Logged" in stream.getvalue()

    def test_configure_once(self) -> None:
        """Test repeated configuration does not stack handlers."""
        configure_logging()
        configure_logging()
        assert len(get_logger().handlers) == 1

    def test_disable_logging(self) -> None:
        """Test disabling silences the package logger."""
        disable_logging()
        logger = get_logger()
        assert logger.propagate is False
        assert all(isinstance(handler, logging.NullHandler) for handler in logger.handlers)
