"""Field declarations for record types.

Record classes declare their layout with the helper functions in this module:

    >>> class Item(Record):
    ...     iid = has_one("int16", key=1)
    ...     name = has_one("string", length=32)

Each helper returns a FieldDecl. The declaration is both the compiled field
descriptor (width, codec, key, default) and the attribute descriptor that
routes ``record.name`` reads and writes to the instance's value store.
Composite declarations resolve tagged variants here as well.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, ClassVar, Iterable, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, InstanceOf, PositiveInt, TypeAdapter, ValidationError

from ..codec.bitpack import BitLayout
from ..codec.cursor import ByteCursor
from ..codec.types import FieldType, IntType, resolve_int_type, resolve_type
from ..exceptions import DecodeError, EncodeError, SchemaError
from .containers import BitField, FixedArray, RecordArray, VariantList

if TYPE_CHECKING:
    from .base import Record


class _Unset:
    """Marker for a scalar field that was never assigned."""

    _instance: ClassVar[_Unset | None] = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Unset:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Unset:
        return self

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


class FieldOptions(BaseModel):
    """Options accepted by scalar field declarations.

    Attributes:
        key: Fixed value identifying the record type during tagged dispatch
        length: Character or digit count for text and packed types
        default: Value reported and encoded while the field is unset
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: Any = None
    length: Optional[PositiveInt] = None
    default: Any = None


def _is_record_type(obj: Any) -> bool:
    return isinstance(obj, type) and hasattr(obj, "__record_schema__")


class FieldDecl:
    """Base class for field declarations.

    Subclasses implement the codec hooks used by the record engine:
    ``initial``, ``validate``, ``resolve``, ``write``, ``read`` and
    ``copy_value``.
    """

    kind: ClassVar[str] = "field"

    def __init__(self) -> None:
        self.name: str | None = None
        self.owner: type | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        if self.name is None:
            self.name = name

    def bind(self, owner: type, name: str) -> None:
        """Attach the declaration to its record type and compile it.

        Raises:
            SchemaError: If the declaration is already used by another record
                type or under another name, or its options are invalid
        """
        if self.owner is not None and (self.owner is not owner or self.name != name):
            raise SchemaError(
                f"Field declaration {self.name!r} of {self.owner.__name__} "
                f"cannot be reused as {owner.__name__}.{name}"
            )
        self.name = name
        self.owner = owner
        self._compile(owner)

    def _compile(self, owner: type) -> None:
        pass

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance._get_field(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        instance._set_field(self.name, value)

    @property
    def key(self) -> Any:
        return None

    def fixed_width(self) -> int | None:
        """Encoded width in bytes, or None when it depends on the value."""
        raise NotImplementedError

    def contains_list(self) -> bool:
        """True if decoding this field sizes a delimited list from the bytes left."""
        return False

    def initial(self) -> Any:
        """Stored value for a freshly constructed record."""
        raise NotImplementedError

    def validate(self, value: Any) -> Any:
        """Check and convert a value assigned through the record's attribute."""
        raise NotImplementedError

    def resolve(self, stored: Any) -> Any:
        """Value reported to readers for the stored value."""
        return stored

    def write(self, stored: Any) -> bytes:
        raise NotImplementedError

    def read(self, cursor: ByteCursor, reserve: int) -> Any:
        """Decode the field.

        Args:
            cursor: Shared cursor positioned at the field
            reserve: Bytes owned by the fixed-width fields after this one
        """
        raise NotImplementedError

    def copy_value(self, stored: Any) -> Any:
        return stored

    def describe(self) -> str:
        """Short human-readable description of the declared type."""
        return self.kind

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}: {self.describe()}>"


class ScalarField(FieldDecl):
    """Integer, text, packed-decimal or packed date/time field."""

    kind = "scalar"

    def __init__(self, type_name: str, options: FieldOptions) -> None:
        super().__init__()
        self.type_name = type_name
        self.options = options
        self.field_type: FieldType | None = None
        self._key: Any = None
        self._default: Any = None

    def _compile(self, owner: type) -> None:
        self.field_type = resolve_type(
            self.type_name, self.options.length, owner.record_encoding  # type: ignore[attr-defined]
        )
        self._key = self._coerce_option("key", self.options.key)
        self._default = self._coerce_option("default", self.options.default)

    def _coerce_option(self, option: str, value: Any) -> Any:
        if value is None:
            return None
        try:
            return self.field_type.validate(value)
        except ValidationError as err:
            raise SchemaError(
                f"Field {self.name}: invalid {option}={value!r} for {self.type_name}: {err}"
            ) from err

    @property
    def key(self) -> Any:
        return self._key

    @property
    def default(self) -> Any:
        return self._default

    def fixed_width(self) -> int:
        return self.field_type.width

    def initial(self) -> Any:
        # Key fields start out holding their key so a fresh candidate encodes its own tag
        return UNSET if self._key is None else self._key

    def validate(self, value: Any) -> Any:
        return self.field_type.validate(value)

    def resolve(self, stored: Any) -> Any:
        return self._default if stored is UNSET else stored

    def write(self, stored: Any) -> bytes:
        return self.field_type.encode(self.resolve(stored))

    def read(self, cursor: ByteCursor, reserve: int) -> Any:
        value = self.field_type.decode(cursor.read(self.field_type.width))
        if self._key is not None and value != self._key:
            raise DecodeError(f"key mismatch: expected {self._key!r}, got {value!r}")
        return value

    def matches_key(self, data: bytes) -> bool:
        """Return True if data holds this field's key value."""
        try:
            return self.field_type.decode(data) == self._key
        except DecodeError:
            return False

    def describe(self) -> str:
        parts = [self.type_name]
        if self.options.length is not None:
            parts.append(f"length={self.options.length}")
        if self._key is not None:
            parts.append(f"key={self._key!r}")
        if self._default is not None:
            parts.append(f"default={self._default!r}")
        return " ".join(parts)


class NestedField(FieldDecl):
    """Another record type's full layout embedded inline."""

    kind = "record"

    def __init__(self, record_type: type[Record]) -> None:
        super().__init__()
        self.record_type = record_type

    def _compile(self, owner: type) -> None:
        self._adapter = TypeAdapter(self.record_type)

    def fixed_width(self) -> int | None:
        return self.record_type.__record_schema__.fixed_width

    def contains_list(self) -> bool:
        return self.record_type.__record_schema__.contains_list

    def initial(self) -> Record:
        return self.record_type()

    def validate(self, value: Any) -> Record:
        return self._adapter.validate_python(value)

    def write(self, stored: Record) -> bytes:
        return stored.to_bytes()

    def read(self, cursor: ByteCursor, reserve: int) -> Record:
        return self.record_type._from_cursor(cursor, reserve)

    def copy_value(self, stored: Record) -> Record:
        return stored.clone()

    def describe(self) -> str:
        return f"record {self.record_type.__name__}"


def _candidate_tuple(candidates: Any) -> tuple[type[Record], ...]:
    if _is_record_type(candidates):
        candidates = (candidates,)
    try:
        result = tuple(candidates)
    except TypeError:
        raise SchemaError(f"Expected a list of record types, got {candidates!r}") from None
    if not result:
        raise SchemaError("At least one candidate record type is required")
    for candidate in result:
        if not _is_record_type(candidate):
            raise SchemaError(f"Candidate {candidate!r} is not a record type")
    return result


class VariantField(FieldDecl):
    """Base for fields holding one or more tagged-variant records.

    A variant is chosen by peeking each candidate's key field at its fixed
    offset, in declaration order; the first candidate whose key matches (or
    that declares no key at all) is decoded.
    """

    def __init__(self, candidates: Iterable[type[Record]]) -> None:
        super().__init__()
        self.candidates = _candidate_tuple(candidates)

    def _compile(self, owner: type) -> None:
        seen: dict[Any, type[Record]] = {}
        for candidate in self.candidates:
            probe = candidate.__record_schema__.key_probe
            if probe is None:
                continue
            key = probe[1].key
            if key in seen:
                raise SchemaError(
                    f"Field {self.name}: candidates {seen[key].__name__} and "
                    f"{candidate.__name__} both declare key {key!r}"
                )
            seen[key] = candidate
        self._element_adapter = TypeAdapter(Union[self.candidates])  # type: ignore[valid-type]
        self._list_adapter = TypeAdapter(list[Union[self.candidates]])  # type: ignore[valid-type]

    def validate_element(self, item: Any) -> Record:
        return self._element_adapter.validate_python(item)

    def contains_list(self) -> bool:
        return any(candidate.__record_schema__.contains_list for candidate in self.candidates)

    def _reject_list_elements(self) -> None:
        # Elements are read back to back, so none may size itself from the bytes left
        for candidate in self.candidates:
            if candidate.__record_schema__.contains_list:
                raise SchemaError(
                    f"Field {self.name}: array element {candidate.__name__} holds a delimited list"
                )

    def element_width(self) -> int | None:
        """Common fixed width of all candidates, or None if they differ."""
        widths = {candidate.__record_schema__.fixed_width for candidate in self.candidates}
        if len(widths) != 1:
            return None
        return widths.pop()

    def read_element(self, cursor: ByteCursor, reserve: int = 0) -> Record:
        """Decode one variant at the cursor.

        Raises:
            DecodeError: If no candidate's key matches
        """
        for candidate in self.candidates:
            probe = candidate.__record_schema__.key_probe
            if probe is None:
                return candidate._from_cursor(cursor, reserve)
            offset, key_field = probe
            needed = offset + key_field.fixed_width()
            head = cursor.peek(needed)
            if len(head) == needed and key_field.matches_key(head[offset:]):
                return candidate._from_cursor(cursor, reserve)
        raise DecodeError(
            f"no candidate of [{self._candidate_names()}] matches the data at byte {cursor.tell()}"
        )

    def _candidate_names(self) -> str:
        return ", ".join(candidate.__name__ for candidate in self.candidates)


class OneOfField(VariantField):
    """Exactly one of several candidate record types occupies this position."""

    kind = "one_of"

    def fixed_width(self) -> int | None:
        return self.element_width()

    def initial(self) -> Record:
        return self.candidates[0]()

    def validate(self, value: Any) -> Record:
        return self.validate_element(value)

    def write(self, stored: Record) -> bytes:
        # The candidate's own key field is the tag on the wire
        return stored.to_bytes()

    def read(self, cursor: ByteCursor, reserve: int) -> Record:
        return self.read_element(cursor, reserve)

    def copy_value(self, stored: Record) -> Record:
        return stored.clone()

    def describe(self) -> str:
        return f"one_of [{self._candidate_names()}]"


class FixedArrayField(VariantField):
    """Exactly ``count`` tagged-variant elements."""

    kind = "fixed_array"

    def __init__(self, count: int, candidates: Iterable[type[Record]]) -> None:
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise SchemaError(f"Fixed array size must be a non-negative int, got {count!r}")
        super().__init__(candidates)
        self.count = count

    def _compile(self, owner: type) -> None:
        super()._compile(owner)
        self._reject_list_elements()
        self._list_adapter = TypeAdapter(
            Annotated[
                list[Union[self.candidates]],  # type: ignore[valid-type]
                Field(min_length=self.count, max_length=self.count),
            ]
        )

    def fixed_width(self) -> int | None:
        if self.count == 0:
            return 0
        width = self.element_width()
        return None if width is None else width * self.count

    def initial(self) -> FixedArray:
        return FixedArray(
            self.validate_element, [self.candidates[0]() for _ in range(self.count)]
        )

    def validate(self, value: Any) -> FixedArray:
        return FixedArray(self.validate_element, self._list_adapter.validate_python(list(value)))

    def write(self, stored: RecordArray) -> bytes:
        return b"".join(item.to_bytes() for item in stored)

    def read(self, cursor: ByteCursor, reserve: int) -> FixedArray:
        items = [self.read_element(cursor) for _ in range(self.count)]
        return FixedArray(self.validate_element, items)

    def copy_value(self, stored: RecordArray) -> RecordArray:
        return stored.clone()

    def describe(self) -> str:
        return f"fixed_array[{self.count}] of [{self._candidate_names()}]"


class CountedArrayField(VariantField):
    """Variable number of elements preceded by an integer count."""

    kind = "counted_array"

    def __init__(self, count_type: str, candidates: Iterable[type[Record]]) -> None:
        super().__init__(candidates)
        self.count_type_name = count_type
        self.count_type: IntType | None = None

    def _compile(self, owner: type) -> None:
        super()._compile(owner)
        self._reject_list_elements()
        self.count_type = resolve_int_type(self.count_type_name)

    def fixed_width(self) -> None:
        return None

    def initial(self) -> VariantList:
        return VariantList(self.validate_element)

    def validate(self, value: Any) -> VariantList:
        return VariantList(self.validate_element, self._list_adapter.validate_python(list(value)))

    def write(self, stored: RecordArray) -> bytes:
        if len(stored) > self.count_type.max_value:
            raise EncodeError(
                f"Field {self.name}: {len(stored)} elements do not fit a "
                f"{self.count_type.type_name} count"
            )
        return self.count_type.encode(len(stored)) + b"".join(item.to_bytes() for item in stored)

    def read(self, cursor: ByteCursor, reserve: int) -> VariantList:
        count = self.count_type.decode(cursor.read(self.count_type.width))
        if count < 0:
            raise DecodeError(f"negative element count {count}")
        return VariantList(self.validate_element, [self.read_element(cursor) for _ in range(count)])

    def copy_value(self, stored: RecordArray) -> RecordArray:
        return stored.clone()

    def describe(self) -> str:
        return f"counted_array<{self.count_type_name}> of [{self._candidate_names()}]"


class ListField(VariantField):
    """Variable number of elements with no count prefix.

    The element count is inferred at decode time from the bytes left in the
    source minus the fixed width of the fields declared after the list.
    """

    kind = "list"

    def _compile(self, owner: type) -> None:
        super()._compile(owner)
        if not self.element_width():
            raise SchemaError(
                f"Field {self.name}: delimited list candidates [{self._candidate_names()}] "
                f"must all share one non-zero fixed width"
            )

    def contains_list(self) -> bool:
        return True

    def fixed_width(self) -> None:
        return None

    def initial(self) -> VariantList:
        return VariantList(self.validate_element)

    def validate(self, value: Any) -> VariantList:
        return VariantList(self.validate_element, self._list_adapter.validate_python(list(value)))

    def write(self, stored: RecordArray) -> bytes:
        return b"".join(item.to_bytes() for item in stored)

    def read(self, cursor: ByteCursor, reserve: int) -> VariantList:
        width = self.element_width()
        available = cursor.remaining() - reserve
        if available < 0:
            raise DecodeError(f"Truncated data: {reserve} trailing bytes expected after the list")
        count, leftover = divmod(available, width)
        if leftover:
            raise DecodeError(
                f"{available} bytes available is not a multiple of the {width}-byte element width"
            )
        return VariantList(self.validate_element, [self.read_element(cursor) for _ in range(count)])

    def copy_value(self, stored: RecordArray) -> RecordArray:
        return stored.clone()

    def describe(self) -> str:
        return f"list_of [{self._candidate_names()}]"


_BIT_FIELD_RESERVED = frozenset(name for name in dir(BitField) if not name.startswith("_"))


class BitFieldField(FieldDecl):
    """Named sub-fields packed into one unsigned storage integer."""

    kind = "bit_field"

    def __init__(self, storage_type: str, subfields: Sequence[Any]) -> None:
        super().__init__()
        self.storage_type_name = storage_type
        self.subfields = tuple(subfields)

    def _compile(self, owner: type) -> None:
        self.storage = resolve_int_type(self.storage_type_name, unsigned=True)
        self.layout = BitLayout(self.subfields, self.storage.width * 8)
        for slot in self.layout:
            if slot.name.startswith("_") or slot.name in _BIT_FIELD_RESERVED:
                raise SchemaError(f"Field {self.name}: sub-field name {slot.name!r} is reserved")
        self._adapter = TypeAdapter(
            Union[InstanceOf[BitField], Annotated[int, Field(ge=0, le=self.storage.max_value)]]
        )

    def fixed_width(self) -> int:
        return self.storage.width

    def initial(self) -> BitField:
        return BitField(self.layout)

    def validate(self, value: Any) -> BitField:
        value = self._adapter.validate_python(value)
        raw = value.raw_value if isinstance(value, BitField) else value
        return BitField(self.layout, raw)

    def write(self, stored: BitField) -> bytes:
        return self.storage.encode(stored.raw_value)

    def read(self, cursor: ByteCursor, reserve: int) -> BitField:
        return BitField(self.layout, self.storage.decode(cursor.read(self.storage.width)))

    def copy_value(self, stored: BitField) -> BitField:
        return stored.clone()

    def describe(self) -> str:
        slots = " ".join(f"{name}:{width}" for name, width in self.subfields)
        return f"bit_field<{self.storage_type_name}> {slots}"


def has_one(
    field_type: str | type[Record],
    *,
    key: Any = None,
    length: int | None = None,
    default: Any = None,
) -> FieldDecl:
    """Declare a scalar field, or a nested record when given a record type.

    Args:
        field_type: Scalar type name (see TYPE_NAMES) or a Record subclass
        key: Value identifying the enclosing record during tagged dispatch;
            decoding any other value fails
        length: Characters (text) or digits (packed) for length-bearing types
        default: Value used while the field is unset

    Returns:
        Field declaration to assign in a record class body

    Raises:
        SchemaError: If the options are invalid for the field type

    Example:
        >>> class Header(Record):
        ...     rtype = has_one("int16", key=42)
        ...     name = has_one("sstring", length=20, default="n/a")
        ...     stamp = has_one("time")
    """
    if _is_record_type(field_type):
        if key is not None or length is not None or default is not None:
            raise SchemaError("Nested record fields take no key, length or default")
        return NestedField(field_type)  # type: ignore[arg-type]

    if not isinstance(field_type, str):
        raise SchemaError(f"Expected a type name or record type, got {field_type!r}")

    try:
        options = FieldOptions(key=key, length=length, default=default)
    except ValidationError as err:
        raise SchemaError(f"Invalid options for {field_type!r} field: {err}") from err
    return ScalarField(field_type, options)


def has_one_of(candidates: Iterable[type[Record]]) -> OneOfField:
    """Declare a tagged single field holding one of the candidate record types."""
    return OneOfField(candidates)


def has_fixed_array(count: int, candidates: Iterable[type[Record]]) -> FixedArrayField:
    """Declare exactly ``count`` elements, each one of the candidate types."""
    return FixedArrayField(count, candidates)


def has_counted_array(count_type: str, candidates: Iterable[type[Record]]) -> CountedArrayField:
    """Declare a count of integer type ``count_type`` followed by that many elements."""
    return CountedArrayField(count_type, candidates)


def has_list_of(candidates: Iterable[type[Record]]) -> ListField:
    """Declare a delimited list sized from the bytes remaining at decode time.

    Only fixed-width fields may follow the list in the same record.
    """
    return ListField(candidates)


def has_bit_field(storage_type: str, subfields: Sequence[tuple[str, int]]) -> BitFieldField:
    """Declare a bit-field.

    Args:
        storage_type: Unsigned storage integer (``uint8``, ``uint16`` or ``uint32``)
        subfields: ``(name, width)`` pairs, packed least-significant bit first

    Example:
        >>> class Flags(Record):
        ...     a = has_bit_field("uint32", [("fld1", 2), ("fld2", 3)])
    """
    return BitFieldField(storage_type, subfields)
