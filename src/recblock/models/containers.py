"""Value containers owned by composite fields.

Array fields hold a RecordArray (FixedArray or VariantList) and bit-fields
hold a BitField. Record instances own these containers exclusively; cloning
a record clones them too.
"""

from __future__ import annotations

import operator
from collections.abc import Sequence
from typing import Any, Callable, Iterable, Iterator

from ..codec.bitpack import BitLayout
from ..exceptions import FieldRangeError


class RecordArray(Sequence):
    """Index-checked sequence of tagged-variant record instances.

    Indices outside ``[0, size)`` raise FieldRangeError; negative indices
    are rejected rather than counted from the end.
    """

    def __init__(self, validator: Callable[[Any], Any], items: Iterable[Any] = ()) -> None:
        """Initialize the array.

        Args:
            validator: Callable checking that an item is one of the candidate types
            items: Initial elements
        """
        self._validate = validator
        self._items: list[Any] = [validator(item) for item in items]

    def _check_index(self, index: Any) -> int:
        if isinstance(index, slice):
            raise TypeError(f"{type(self).__name__} does not support slicing")
        index = operator.index(index)
        if not 0 <= index < len(self._items):
            raise FieldRangeError(
                f"Index {index} out of range for {type(self).__name__} of size {len(self._items)}"
            )
        return index

    def __getitem__(self, index: Any) -> Any:
        return self._items[self._check_index(index)]

    def __setitem__(self, index: Any, item: Any) -> None:
        self._items[self._check_index(index)] = self._validate(item)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    @property
    def size(self) -> int:
        """Current number of elements."""
        return len(self._items)

    def clone(self) -> RecordArray:
        """Return an independent copy with every element cloned."""
        return type(self)(self._validate, [item.clone() for item in self._items])

    def __deepcopy__(self, memo: dict[int, Any]) -> RecordArray:
        return self.clone()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordArray):
            return NotImplemented
        return type(self) is type(other) and self._items == other._items

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"


class FixedArray(RecordArray):
    """Array with a size fixed by the record layout."""


class VariantList(RecordArray):
    """Growable array backing counted arrays and delimited lists."""

    def append(self, item: Any) -> None:
        """Add an element at the end."""
        self._items.append(self._validate(item))

    def extend(self, items: Iterable[Any]) -> None:
        for item in items:
            self.append(item)

    def clear(self) -> None:
        self._items.clear()


class BitField:
    """Value of a bit-field: sub-fields exposed as attributes over one integer.

    Example:
        >>> flags = BitField(BitLayout([("fld1", 2), ("fld2", 3)], 32))
        >>> flags.fld2 = 2
        >>> flags.fld1 = 1
        >>> flags.raw_value
        9
    """

    def __init__(self, layout: BitLayout, raw_value: int = 0) -> None:
        object.__setattr__(self, "_layout", layout)
        object.__setattr__(self, "_raw", 0)
        self.raw_value = raw_value

    @property
    def raw_value(self) -> int:
        """The storage integer with every sub-field folded in."""
        return self._raw

    @raw_value.setter
    def raw_value(self, value: int) -> None:
        self._raw = operator.index(value) & ((1 << self._layout.storage_bits) - 1)

    @property
    def layout(self) -> BitLayout:
        return self._layout

    def __getattr__(self, name: str) -> int:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._layout.extract(self._raw, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or name in ("raw_value",):
            object.__setattr__(self, name, value)
            return
        self._raw = self._layout.insert(self._raw, name, operator.index(value))

    def to_dict(self) -> dict[str, int]:
        return self._layout.unpack(self._raw)

    def clone(self) -> BitField:
        return BitField(self._layout, self._raw)

    def __deepcopy__(self, memo: dict[int, Any]) -> BitField:
        return self.clone()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitField):
            return NotImplemented
        return self._layout == other._layout and self._raw == other._raw

    __hash__ = None  # type: ignore[assignment]

    def __dir__(self) -> list[str]:
        return [*super().__dir__(), *(slot.name for slot in self._layout)]

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={value}" for name, value in self.to_dict().items())
        return f"BitField({fields})"
