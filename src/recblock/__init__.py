"""recblock: Declarative Binary Record Codec

A Python library for reading and writing fixed-layout binary records, the
kind found in mainframe exports, legacy flat files and device protocols.
Record types are declared once in a class body; instances then encode to
and decode from exact byte layouts.

Key Features:
- Declarative record types with pydantic-validated field assignment
- Big-endian integers, padded text, UTF-16 text and packed decimal (BCD)
- Packed dates and timestamps
- Bit-fields, nested records and key-tagged variants
- Fixed, counted and delimited arrays

Quick Start:
    >>> from recblock import Record, has_one
    >>>
    >>> class Voter(Record):
    ...     voter_id = has_one("int32")
    ...     last_name = has_one("sstring", length=20)
    ...     born = has_one("date")
    >>>
    >>> voter = Voter(voter_id=7, last_name="Smith")
    >>> data = voter.to_bytes()
    >>> Voter(data).last_name
    'Smith'
"""

from __future__ import annotations

__version__ = "0.1.0"

from .codec import decode, encode, read_records, try_decode
from .codec.cursor import ByteCursor
from .codec.types import TYPE_NAMES
from .exceptions import (
    DecodeError,
    EncodeError,
    FieldRangeError,
    RecblockError,
    SchemaError,
    UnknownFieldError,
)
from .models import (
    UNSET,
    BitField,
    FixedArray,
    Record,
    RecordSchema,
    VariantList,
    has_bit_field,
    has_counted_array,
    has_fixed_array,
    has_list_of,
    has_one,
    has_one_of,
    make_record,
)
from .utils import encoded_size, field_layout, field_sizes

__all__ = [
    # Core API
    "Record",
    "make_record",
    "encode",
    "decode",
    "try_decode",
    "read_records",
    "ByteCursor",
    # Field declarations
    "has_one",
    "has_one_of",
    "has_fixed_array",
    "has_counted_array",
    "has_list_of",
    "has_bit_field",
    "TYPE_NAMES",
    "UNSET",
    # Field values
    "FixedArray",
    "VariantList",
    "BitField",
    "RecordSchema",
    # Exceptions
    "RecblockError",
    "SchemaError",
    "EncodeError",
    "DecodeError",
    "FieldRangeError",
    "UnknownFieldError",
    # Utilities
    "encoded_size",
    "field_sizes",
    "field_layout",
]
