"""Byte-level codec for recblock.

This module provides the scalar field codecs, the byte cursor and the
encode/decode engine that sequences fields over it.
"""

from __future__ import annotations

from .bitpack import BitLayout, BitSlot
from .cursor import ByteCursor
from .decoder import decode, read_records, try_decode
from .encoder import encode
from .types import TYPE_NAMES, FieldType, resolve_type

__all__ = [
    "encode",
    "decode",
    "try_decode",
    "read_records",
    "ByteCursor",
    "BitLayout",
    "BitSlot",
    "FieldType",
    "TYPE_NAMES",
    "resolve_type",
]
