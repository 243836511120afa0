"""Record encoder.

This module provides the encode() function that turns a record instance into
its exact byte layout: each field's bytes, in declaration order, with no
framing in between.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..exceptions import EncodeError

if TYPE_CHECKING:
    from ..models.base import Record


def encode(record: Record) -> bytes:
    """Encode a record instance to bytes.

    Unset fields with a declared default are encoded as that default; fields
    explicitly cleared to ``None`` are encoded as their type's zero form.

    Args:
        record: Record instance to encode

    Returns:
        Concatenated field bytes

    Raises:
        EncodeError: If a field value cannot be represented, or the result
            exceeds the record type's record_max_bytes

    Example:
        >>> class Pair(Record):
        ...     foo = has_one("int16")
        ...     bar = has_one("int32")
        >>> encode(Pair(foo=32, bar=24))
        b'\\x00 \\x00\\x00\\x00\\x18'
    """
    record_type = type(record)
    schema = record_type.__record_schema__

    chunks = [field.write(record._values[field.name]) for field in schema.fields]
    encoded = b"".join(chunks)

    max_bytes = record_type.record_max_bytes
    if max_bytes is not None and len(encoded) > max_bytes:
        raise EncodeError(
            f"Encoded {record_type.__name__} size ({len(encoded)} bytes) exceeds "
            f"record_max_bytes={max_bytes}"
        )

    return encoded
