"""Bit-field packing and unpacking utilities.

A bit-field stores several small unsigned values in one unsigned integer.
Sub-fields are assigned offsets in declaration order, least-significant bit
first: a sub-field's offset is the sum of the widths declared before it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Sequence

from ..exceptions import SchemaError, UnknownFieldError


@dataclass(frozen=True)
class BitSlot:
    """Position of one sub-field within the storage integer.

    Attributes:
        name: Sub-field name
        width: Width in bits
        offset: Bit offset from the least-significant bit
    """

    name: str
    width: int
    offset: int

    @property
    def mask(self) -> int:
        return (1 << self.width) - 1


class BitLayout:
    """Immutable mapping of sub-field names to bit slots.

    Example:
        >>> layout = BitLayout([("fld1", 2), ("fld2", 3)], storage_bits=32)
        >>> layout.insert(0, "fld2", 2)
        8
        >>> layout.extract(9, "fld1")
        1
    """

    def __init__(self, declaration: Sequence[Any], storage_bits: int) -> None:
        """Compile a flat ``[(name, width), ...]`` declaration.

        Args:
            declaration: Sub-field names and bit widths in declaration order
            storage_bits: Width of the storage integer in bits

        Raises:
            SchemaError: If the declaration is malformed, repeats a name, or
                is wider than the storage integer
        """
        slots: dict[str, BitSlot] = {}
        offset = 0
        for entry in declaration:
            if not (
                isinstance(entry, (tuple, list))
                and len(entry) == 2
                and isinstance(entry[0], str)
                and isinstance(entry[1], int)
                and not isinstance(entry[1], bool)
            ):
                raise SchemaError(
                    f"Bit-field sub-fields must be (name, width) pairs, got {entry!r}"
                )
            name, width = entry
            if width < 1:
                raise SchemaError(f"Bit-field sub-field {name!r}: width must be positive")
            if name in slots:
                raise SchemaError(f"Bit-field sub-field {name!r} declared twice")
            slots[name] = BitSlot(name, width, offset)
            offset += width

        if offset > storage_bits:
            raise SchemaError(
                f"Bit-field sub-fields need {offset} bits but storage holds {storage_bits}"
            )

        self._slots = slots
        self.storage_bits = storage_bits
        self.total_bits = offset

    def slot(self, name: str) -> BitSlot:
        """Look up a sub-field.

        Raises:
            UnknownFieldError: If name was not declared
        """
        try:
            return self._slots[name]
        except KeyError:
            raise UnknownFieldError(
                f"Bit-field has no sub-field {name!r}. Declared: {list(self._slots)}"
            ) from None

    def extract(self, raw: int, name: str) -> int:
        """Return the value of one sub-field from the storage integer."""
        slot = self.slot(name)
        return (raw >> slot.offset) & slot.mask

    def insert(self, raw: int, name: str, value: int) -> int:
        """Return raw with one sub-field replaced by value (masked to its width)."""
        slot = self.slot(name)
        cleared = raw & ~(slot.mask << slot.offset)
        return cleared | ((value & slot.mask) << slot.offset)

    def pack(self, values: Mapping[str, int]) -> int:
        """Fold sub-field values into one storage integer."""
        raw = 0
        for name, value in values.items():
            raw = self.insert(raw, name, value)
        return raw

    def unpack(self, raw: int) -> dict[str, int]:
        """Split a storage integer into its sub-field values."""
        return {name: self.extract(raw, name) for name in self._slots}

    def __iter__(self) -> Iterator[BitSlot]:
        return iter(self._slots.values())

    def __contains__(self, name: object) -> bool:
        return name in self._slots

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitLayout):
            return NotImplemented
        return self._slots == other._slots and self.storage_bits == other.storage_bits

    def __hash__(self) -> int:
        return hash((tuple(self._slots.values()), self.storage_bits))
