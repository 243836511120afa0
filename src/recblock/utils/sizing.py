"""Record size calculation utilities.

This module provides functions to calculate the encoded size of records,
from the schema alone where the layout is fixed, or from an instance's
current contents.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import SchemaError
from ..models.base import Record


@dataclass(frozen=True)
class FieldLayout:
    """Static placement of one field.

    Attributes:
        name: Field name
        description: Declared type, e.g. ``"int16 key=42"``
        offset: Byte offset, or None after a variable-width field
        width: Width in bytes, or None if variable
    """

    name: str
    description: str
    offset: int | None
    width: int | None


def _record_class(record_or_class: Record | type[Record]) -> type[Record]:
    if isinstance(record_or_class, Record):
        return type(record_or_class)
    return record_or_class


def encoded_size(record_or_class: Record | type[Record]) -> int:
    """Calculate the encoded size of a record in bytes.

    For a record class the size comes from the schema and requires a fixed
    layout. For an instance it is the length of its current encoding, which
    also covers counted arrays and delimited lists.

    Args:
        record_or_class: Record instance or class

    Returns:
        Size in bytes

    Raises:
        SchemaError: If a class with variable-width fields is given

    Example:
        >>> class Pair(Record):
        ...     foo = has_one("int16")
        ...     bar = has_one("int32")
        >>> encoded_size(Pair)
        6
    """
    if isinstance(record_or_class, Record):
        return len(record_or_class.to_bytes())

    width = record_or_class.__record_schema__.fixed_width
    if width is None:
        raise SchemaError(
            f"{record_or_class.__name__} has variable-width fields; "
            f"pass an instance to measure it"
        )
    return width


def field_sizes(record_or_class: Record | type[Record]) -> dict[str, int | None]:
    """Get the size in bytes of each field of a record.

    Args:
        record_or_class: Record instance or class

    Returns:
        Dictionary mapping field names to their size; for a class,
        variable-width fields map to None

    Example:
        >>> field_sizes(Pair)
        {'foo': 2, 'bar': 4}
    """
    if isinstance(record_or_class, Record):
        schema = type(record_or_class).__record_schema__
        return {
            field.name: len(field.write(record_or_class._values[field.name]))
            for field in schema
        }
    return record_or_class.__record_schema__.field_widths()


def field_layout(record_or_class: Record | type[Record]) -> list[FieldLayout]:
    """Describe where each field sits in the record.

    Returns:
        One FieldLayout per field, in wire order
    """
    schema = _record_class(record_or_class).__record_schema__
    rows: list[FieldLayout] = []
    offset: int | None = 0
    for field in schema:
        width = field.fixed_width()
        rows.append(FieldLayout(field.name, field.describe(), offset, width))
        offset = None if offset is None or width is None else offset + width
    return rows
