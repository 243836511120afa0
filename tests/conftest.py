"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import datetime

import pytest


@pytest.fixture
def pair_bytes() -> bytes:
    """Encoded int16 42 followed by int32 21."""
    return b"\x00\x2a\x00\x00\x00\x15"


@pytest.fixture
def birthday() -> datetime.date:
    """Sample calendar date for packed date tests."""
    return datetime.date(1967, 9, 30)


@pytest.fixture
def timestamp() -> datetime.datetime:
    """Sample timestamp with non-zero seconds."""
    return datetime.datetime(1985, 5, 30, 7, 6, 5)
