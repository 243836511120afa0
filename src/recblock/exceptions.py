"""Exception hierarchy for recblock.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from RecblockError for easy catching of any recblock-specific error.
"""

from __future__ import annotations


class RecblockError(Exception):
    """Base exception for all recblock errors."""

    pass


class SchemaError(RecblockError):
    """Raised when a record type cannot be compiled.

    Raised once, when the record class is created, never while working with
    instances.

    Examples:
        - Duplicate field names
        - Two one-of candidates declaring the same key value
        - Bit-field sub-fields wider than the storage integer
        - Unknown field type name or invalid field options
    """

    pass


class EncodeError(RecblockError):
    """Raised when encoding a record fails.

    Examples:
        - Counted array holds more elements than its count field can express
        - Encoded record exceeds record_max_bytes
    """

    pass


class DecodeError(RecblockError):
    """Raised when decoding binary data fails.

    Examples:
        - Truncated data (insufficient bytes)
        - Key field value does not match its declared key
        - No one-of candidate matches the bytes at the cursor
        - Packed decimal nibble above 9, or an impossible calendar date
    """

    pass


class FieldRangeError(RecblockError, IndexError):
    """Raised when an array index is outside ``[0, size)``.

    Negative indices are never wrapped around.
    """

    pass


class UnknownFieldError(RecblockError, AttributeError):
    """Raised when a field or bit-field sub-field name is not declared.

    This signals a programming or schema mismatch, not bad data.
    """

    pass
