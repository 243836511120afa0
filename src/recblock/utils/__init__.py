"""Utility functions for recblock.

This module provides record size and layout calculation.
"""

from __future__ import annotations

from .sizing import FieldLayout, encoded_size, field_layout, field_sizes

__all__ = [
    "encoded_size",
    "field_sizes",
    "field_layout",
    "FieldLayout",
]
