"""Record decoder.

This module provides the decode entry points. Fields are decoded in
declaration order over one shared ByteCursor; composite fields recurse into
their nested record types over the same cursor.
"""

from __future__ import annotations

import struct
from typing import TYPE_CHECKING, Iterator, TypeVar

from ..exceptions import DecodeError
from .cursor import ByteCursor, ByteSource

if TYPE_CHECKING:
    from ..models.base import Record

R = TypeVar("R", bound="Record")


def decode(record_type: type[R], source: ByteSource) -> R:
    """Decode a new record instance (fail-fast).

    Args:
        record_type: Record class to decode
        source: Bytes, a seekable binary stream, or a ByteCursor

    Returns:
        Decoded record instance

    Raises:
        DecodeError: If data is truncated or does not match the record layout

    Example:
        >>> record = decode(Pair, b"\\x00 \\x00\\x00\\x00\\x18")
        >>> record.foo, record.bar
        (32, 24)
    """
    return record_type(source)


def try_decode(record: Record, source: ByteSource) -> bool:
    """Decode into an existing record, reporting failure instead of raising.

    On failure the record's field values and the stream position are
    unspecified; callers that want to retry should seek back to a saved mark.

    Returns:
        True if the whole record decoded, False on a DecodeError
    """
    return record.try_decode(source)


def decode_into(record: Record, cursor: ByteCursor, reserve: int = 0) -> None:
    """Decode every field of record from cursor, in declaration order.

    Args:
        record: Instance receiving the decoded values
        cursor: Shared cursor positioned at the start of the record
        reserve: Bytes after this record that belong to the enclosing record

    Raises:
        DecodeError: If any field fails to decode
    """
    record_type = type(record)
    schema = record_type.__record_schema__

    for field, trailing in schema.layout():
        try:
            value = field.read(cursor, trailing + reserve)
        except DecodeError as e:
            raise DecodeError(f"{record_type.__name__}.{field.name}: {e}") from e
        except (ValueError, struct.error) as e:
            raise DecodeError(
                f"Error decoding field {record_type.__name__}.{field.name}: {e}"
            ) from e
        record._values[field.name] = value


def read_records(record_type: type[R], source: ByteSource) -> Iterator[R]:
    """Yield consecutive records until the source is exhausted.

    This is the usual loop over a flat file of fixed-width records.

    Raises:
        DecodeError: If a record fails to decode (including a truncated tail)

    Example:
        >>> with open("voters.dat", "rb") as stream:
        ...     for voter in read_records(Voter, stream):
        ...         print(voter.last_name)
    """
    cursor = ByteCursor.wrap(source)
    while not cursor.at_end():
        yield record_type(cursor)
