"""Scalar field codecs.

Every scalar field type turns a Python value into an exact, fixed number of
bytes and back. Widths are intrinsic for integers and derived from the
declared ``length`` for text and packed types. ``None`` always encodes as the
type's zero representation.

Assignment-time validation is delegated to pydantic: each type exposes a
``TypeAdapter`` for its Python value type, so mismatched values are rejected
when they are set rather than when the record is encoded.
"""

from __future__ import annotations

import datetime
import struct
from functools import cached_property
from typing import Annotated, Any, ClassVar, Optional

from pydantic import Field, TypeAdapter

from ..exceptions import DecodeError, EncodeError, SchemaError

DEFAULT_ENCODING = "latin-1"

# Big-endian struct formats for the integer types
_INT_FORMATS: dict[str, str] = {
    "int8": ">b",
    "uint8": ">B",
    "int16": ">h",
    "uint16": ">H",
    "int32": ">i",
    "uint32": ">I",
}


class FieldType:
    """Base class for scalar codecs.

    Attributes:
        type_name: Name used in field declarations (e.g. ``"int16"``)
        nullable: Whether an all-zero byte pattern decodes to ``None``
        width: Encoded size in bytes
    """

    type_name: ClassVar[str] = ""
    nullable: ClassVar[bool] = False
    width: int

    def python_type(self) -> Any:
        """Return the annotation values of this type are validated against."""
        raise NotImplementedError

    @cached_property
    def adapter(self) -> TypeAdapter[Any]:
        """Pydantic adapter accepting a value of this type or ``None``."""
        return TypeAdapter(Optional[self.python_type()])

    def validate(self, value: Any) -> Any:
        """Validate (and coerce) a value before it is stored in a record.

        Raises:
            pydantic.ValidationError: If value does not fit this type
        """
        return self.adapter.validate_python(value)

    def encode(self, value: Any) -> bytes:
        raise NotImplementedError

    def decode(self, data: bytes) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.type_name!r}, width={self.width})"


class IntType(FieldType):
    """Two's-complement big-endian integer of 1, 2 or 4 bytes."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name  # type: ignore[misc]
        self._struct = struct.Struct(_INT_FORMATS[type_name])
        self.width = self._struct.size
        self.signed = not type_name.startswith("u")

        bits = self.width * 8
        if self.signed:
            self.min_value = -(1 << (bits - 1))
            self.max_value = (1 << (bits - 1)) - 1
        else:
            self.min_value = 0
            self.max_value = (1 << bits) - 1

    def python_type(self) -> Any:
        return Annotated[int, Field(ge=self.min_value, le=self.max_value)]

    def encode(self, value: int | None) -> bytes:
        try:
            return self._struct.pack(0 if value is None else value)
        except struct.error as err:
            raise EncodeError(f"{self.type_name}: cannot encode {value!r}: {err}") from err

    def decode(self, data: bytes) -> int:
        # Any bit pattern is a valid integer
        return self._struct.unpack(data)[0]


class FixedText(FieldType):
    """Fixed-length text, right-padded with null bytes."""

    type_name = "string"
    pad_char = "\x00"

    def __init__(self, length: int, encoding: str = DEFAULT_ENCODING) -> None:
        self.length = length
        self.width = length
        self.encoding = encoding
        # Padding is written in the field encoding (0x40 is the EBCDIC space)
        try:
            self.pad = self.pad_char.encode(encoding)
        except LookupError as err:
            raise SchemaError(f"{self.type_name}: {err}") from err
        if len(self.pad) != 1:
            raise SchemaError(f"{self.type_name}: {encoding!r} is not a single-byte encoding")

    def python_type(self) -> Any:
        return str

    def encode(self, value: str | None) -> bytes:
        try:
            raw = ("" if value is None else value).encode(self.encoding)
        except UnicodeEncodeError as err:
            raise EncodeError(f"{self.type_name}: {err}") from err
        return raw[: self.width].ljust(self.width, self.pad)

    def decode(self, data: bytes) -> str:
        try:
            return data.rstrip(self.pad).decode(self.encoding)
        except UnicodeDecodeError as err:
            raise DecodeError(f"{self.type_name}: invalid {self.encoding} text: {err}") from err


class SpaceText(FixedText):
    """Fixed-length text, right-padded with spaces (flat-file style)."""

    type_name = "sstring"
    pad_char = " "


class WideText(FieldType):
    """Fixed-length text stored as UTF-16 big-endian, two bytes per character."""

    type_name = "utf16"
    pad = b"\x00\x00"
    encoding = "utf-16-be"

    def __init__(self, length: int) -> None:
        self.length = length
        self.width = length * 2

    def python_type(self) -> Any:
        return str

    def encode(self, value: str | None) -> bytes:
        try:
            raw = ("" if value is None else value).encode(self.encoding)[: self.width]
        except UnicodeEncodeError as err:
            raise EncodeError(f"{self.type_name}: {err}") from err
        # Never keep half of a surrogate pair
        if len(raw) >= 2 and raw[-2] & 0xFC == 0xD8:
            raw = raw[:-2]
        return raw + self.pad * ((self.width - len(raw)) // 2)

    def decode(self, data: bytes) -> str:
        end = len(data)
        while end >= 2 and data[end - 2 : end] == self.pad:
            end -= 2
        try:
            return data[:end].decode(self.encoding)
        except UnicodeDecodeError as err:
            raise DecodeError(f"{self.type_name}: invalid UTF-16 text: {err}") from err


class PackedNumber(FieldType):
    """Unsigned packed decimal (BCD), two digits per byte.

    Values wrap modulo ``10**length``; an odd digit count leaves a trailing
    zero nibble.

    Example:
        >>> PackedNumber(3).encode(32)
        b'\\x03\\x20'
    """

    type_name = "packed"

    def __init__(self, length: int) -> None:
        self.length = length
        self.width = (length + 1) // 2

    def python_type(self) -> Any:
        return Annotated[int, Field(ge=0)]

    def encode(self, value: int | None) -> bytes:
        digits = f"{(value or 0) % 10 ** self.length:0{self.length}d}"
        if len(digits) % 2:
            digits += "0"
        return bytes.fromhex(digits)

    def decode(self, data: bytes) -> int:
        return int(self.decode_digits(data))

    def decode_digits(self, data: bytes) -> str:
        """Return the significant decimal digits held by data.

        Raises:
            DecodeError: If any nibble, the pad nibble included, is above 9
        """
        nibbles = data.hex()
        if not nibbles.isdigit():
            raise DecodeError(f"{self.type_name}: invalid packed decimal {nibbles!r}")
        return nibbles[: self.length]


class PackedDate(PackedNumber):
    """Calendar date packed as the 8 digits YYYYMMDD (4 bytes).

    All-zero bytes decode to ``None``.
    """

    type_name = "date"
    nullable = True
    digits = 8
    pattern = "%Y%m%d"

    def __init__(self) -> None:
        super().__init__(self.digits)

    def python_type(self) -> Any:
        return datetime.date

    def to_digits(self, value: Any) -> str:
        return f"{value.year:04d}{value.month:02d}{value.day:02d}"

    def from_datetime(self, parsed: datetime.datetime) -> Any:
        return parsed.date()

    def encode(self, value: Any) -> bytes:
        if value is None:
            return bytes(self.width)
        return super().encode(int(self.to_digits(value)))

    def decode(self, data: bytes) -> Any:
        if not any(data):
            return None
        digits = self.decode_digits(data)
        try:
            parsed = datetime.datetime.strptime(digits, self.pattern)
        except ValueError as err:
            raise DecodeError(f"{self.type_name}: {digits!r} is not a valid value: {err}") from err
        return self.from_datetime(parsed)


class PackedDateTime(PackedDate):
    """Timestamp packed as the 14 digits YYYYMMDDHHMMSS (7 bytes)."""

    type_name = "time"
    digits = 14
    pattern = "%Y%m%d%H%M%S"

    def python_type(self) -> Any:
        return datetime.datetime

    def to_digits(self, value: Any) -> str:
        return f"{super().to_digits(value)}{value.hour:02d}{value.minute:02d}{value.second:02d}"

    def from_datetime(self, parsed: datetime.datetime) -> Any:
        return parsed


class PackedDateTimeMinute(PackedDateTime):
    """Timestamp packed as the 12 digits YYYYMMDDHHMM (6 bytes); seconds are dropped."""

    type_name = "time_hhmm"
    digits = 12
    pattern = "%Y%m%d%H%M"

    def to_digits(self, value: Any) -> str:
        return f"{value.year:04d}{value.month:02d}{value.day:02d}{value.hour:02d}{value.minute:02d}"


_LENGTH_TYPES: dict[str, type[FieldType]] = {
    "string": FixedText,
    "sstring": SpaceText,
    "utf16": WideText,
    "packed": PackedNumber,
}

_CALENDAR_TYPES: dict[str, type[PackedDate]] = {
    "date": PackedDate,
    "time": PackedDateTime,
    "time_hhmm": PackedDateTimeMinute,
}

TYPE_NAMES: tuple[str, ...] = (*_INT_FORMATS, *_LENGTH_TYPES, *_CALENDAR_TYPES)


def resolve_type(
    type_name: str, length: int | None = None, encoding: str = DEFAULT_ENCODING
) -> FieldType:
    """Build the codec for a declared scalar type.

    Args:
        type_name: One of TYPE_NAMES
        length: Character / digit count, required for text and packed types
        encoding: Text encoding for ``string`` and ``sstring`` fields

    Returns:
        FieldType instance

    Raises:
        SchemaError: If the type is unknown or a required length is missing
    """
    if type_name in _INT_FORMATS:
        return IntType(type_name)

    if type_name in _LENGTH_TYPES:
        if length is None:
            raise SchemaError(f"Field type {type_name!r} requires length=")
        type_class = _LENGTH_TYPES[type_name]
        if issubclass(type_class, FixedText):
            return type_class(length, encoding)
        return type_class(length)  # type: ignore[call-arg]

    if type_name in _CALENDAR_TYPES:
        return _CALENDAR_TYPES[type_name]()

    raise SchemaError(
        f"Unknown field type {type_name!r}. Supported: {', '.join(TYPE_NAMES)}"
    )


def resolve_int_type(type_name: str, *, unsigned: bool = False) -> IntType:
    """Build an integer codec, for count prefixes and bit-field storage.

    Raises:
        SchemaError: If type_name is not an (unsigned, when requested) integer type
    """
    if type_name not in _INT_FORMATS or (unsigned and not type_name.startswith("u")):
        kinds = "unsigned integer" if unsigned else "integer"
        raise SchemaError(f"{type_name!r} is not an {kinds} type")
    return IntType(type_name)
