"""Record modeling for recblock.

This module provides the Record base class, the field declaration helpers
and the compiled RecordSchema.
"""

from __future__ import annotations

from .base import Record, make_record
from .containers import BitField, FixedArray, RecordArray, VariantList
from .fields import (
    UNSET,
    FieldDecl,
    FieldOptions,
    has_bit_field,
    has_counted_array,
    has_fixed_array,
    has_list_of,
    has_one,
    has_one_of,
)
from .schema import RecordSchema

__all__ = [
    "Record",
    "make_record",
    "RecordSchema",
    "FieldDecl",
    "FieldOptions",
    "UNSET",
    "has_one",
    "has_one_of",
    "has_fixed_array",
    "has_counted_array",
    "has_list_of",
    "has_bit_field",
    "RecordArray",
    "FixedArray",
    "VariantList",
    "BitField",
]
