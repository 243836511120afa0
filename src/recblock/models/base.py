"""Base record class and record-type configuration.

This module provides the Record class that all record types inherit from.
Subclassing Record compiles the class body's field declarations into the
type's RecordSchema; instances then hold one value per declared field.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Iterable, TypeVar

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from ..codec.cursor import ByteCursor, ByteSource
from ..codec.decoder import decode_into
from ..codec.encoder import encode
from ..codec.types import DEFAULT_ENCODING
from ..exceptions import DecodeError, SchemaError, UnknownFieldError
from .containers import BitField, RecordArray
from .fields import FieldDecl
from .schema import RecordSchema

logger = logging.getLogger(__name__)

R = TypeVar("R", bound="Record")


class Record:
    """Base class for all binary record types.

    Record types declare their fields in wire order with the ``has_*``
    helpers. Options can be configured as ClassVar attributes (or on a nested
    ``Config`` class):

    Example:
        >>> class Pair(Record):
        ...     foo = has_one("int16")
        ...     bar = has_one("int32")
        ...
        ...     record_max_bytes: ClassVar[Optional[int]] = 16
        >>> pair = Pair(foo=32, bar=24)
        >>> data = pair.to_bytes()
        >>> Pair(data).bar
        24

    Attributes:
        record_encoding: Text encoding of ``string`` and ``sstring`` fields
        record_max_bytes: Maximum encoded size in bytes (optional, checked on encode)
    """

    record_encoding: ClassVar[str] = DEFAULT_ENCODING
    record_max_bytes: ClassVar[int | None] = None

    __record_schema__: ClassVar[RecordSchema]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        """Compile the subclass's field declarations into its schema.

        Options may also come from a nested Config class.

        Raises:
            SchemaError: If the declarations are invalid
        """
        super().__init_subclass__(**kwargs)

        if hasattr(cls, "Config"):
            config = cls.Config
            if hasattr(config, "record_encoding"):
                cls.record_encoding = config.record_encoding
            if hasattr(config, "record_max_bytes"):
                cls.record_max_bytes = config.record_max_bytes

        bases = [
            base.__record_schema__
            for base in cls.__bases__
            if isinstance(base, type) and issubclass(base, Record) and base.__record_schema__.fields
        ]
        if len(bases) > 1:
            raise SchemaError(f"{cls.__name__}: cannot inherit fields from more than one record type")

        own = [(name, value) for name, value in cls.__dict__.items() if isinstance(value, FieldDecl)]
        cls.__record_schema__ = RecordSchema.compile(
            cls, own, bases[0] if bases else None, reserved=_RESERVED_NAMES
        )
        logger.debug(
            "Compiled record type %s: %d fields, fixed width %s",
            cls.__name__,
            len(cls.__record_schema__),
            cls.__record_schema__.fixed_width,
        )

    def __init__(self, source: ByteSource | None = None, **values: Any) -> None:
        """Create a record, empty or decoded from source.

        Args:
            source: Bytes, a seekable binary stream or a ByteCursor to decode
                from; None for an empty record
            **values: Field values to assign after construction

        Raises:
            DecodeError: If source does not hold a valid record
            UnknownFieldError: If values names an undeclared field
        """
        self._reset()
        if source is not None:
            decode_into(self, ByteCursor.wrap(source))
        for name, value in values.items():
            setattr(self, name, value)

    @classmethod
    def _from_cursor(cls: type[R], cursor: ByteCursor, reserve: int = 0) -> R:
        record = cls.__new__(cls)
        object.__setattr__(record, "_values", {})
        decode_into(record, cursor, reserve)
        return record

    def _reset(self) -> None:
        schema = type(self).__record_schema__
        object.__setattr__(self, "_values", {field.name: field.initial() for field in schema})

    def try_decode(self, source: ByteSource) -> bool:
        """Decode source into this record, reporting failure instead of raising.

        If decoding fails partway, field values and the stream position are
        unspecified.

        Args:
            source: Bytes, a seekable binary stream or a ByteCursor

        Returns:
            True on success, False if the data does not hold a valid record
        """
        try:
            decode_into(self, ByteCursor.wrap(source))
        except DecodeError as err:
            logger.debug("Failed to decode %s: %s", type(self).__name__, err)
            return False
        return True

    def to_bytes(self) -> bytes:
        """Encode the record's current field values.

        Raises:
            EncodeError: If a value cannot be represented
        """
        return encode(self)

    def clone(self: R) -> R:
        """Return a fully independent copy of this record.

        Nested records, array elements and tagged-variant payloads are copied
        recursively, never shared.
        """
        record_type = type(self)
        twin = record_type.__new__(record_type)
        values = {
            field.name: field.copy_value(self._values[field.name])
            for field in record_type.__record_schema__
        }
        object.__setattr__(twin, "_values", values)
        return twin

    def __copy__(self: R) -> R:
        return self.clone()

    def __deepcopy__(self: R, memo: dict[int, Any]) -> R:
        return self.clone()

    def to_dict(self) -> dict[str, Any]:
        """Return field values as plain Python data (nested records as dicts)."""
        return {
            field.name: _plain(getattr(self, field.name))
            for field in type(self).__record_schema__
        }

    def _get_field(self, name: str) -> Any:
        return type(self).__record_schema__[name].resolve(self._values[name])

    def _set_field(self, name: str, value: Any) -> None:
        self._values[name] = type(self).__record_schema__[name].validate(value)

    def __setattr__(self, name: str, value: Any) -> None:
        # Only declared fields; methods and class attributes are never shadowed
        if name.startswith("_") or name in type(self).__record_schema__:
            object.__setattr__(self, name, value)
            return
        raise UnknownFieldError(f"{type(self).__name__} has no field {name!r}")

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        raise UnknownFieldError(f"{type(self).__name__} has no field {name!r}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        if type(self) is not type(other):
            return False
        return all(
            getattr(self, name) == getattr(other, name)
            for name in type(self).__record_schema__.names
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{name}={getattr(self, name)!r}" for name in type(self).__record_schema__.names
        )
        return f"{type(self).__name__}({fields})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        # Records are validated by type only; their fields validate themselves
        return core_schema.is_instance_schema(cls)


Record.__record_schema__ = RecordSchema(Record, ())

_RESERVED_NAMES = frozenset(name for name in dir(Record) if not name.startswith("_"))


def _plain(value: Any) -> Any:
    if isinstance(value, (Record, BitField)):
        return value.to_dict()
    if isinstance(value, RecordArray):
        return [_plain(item) for item in value]
    return value


def make_record(
    name: str,
    fields: Iterable[tuple[str, FieldDecl]],
    base: type[Record] = Record,
    **class_vars: Any,
) -> type[Record]:
    """Build a record type from an explicit field list.

    Args:
        name: Class name of the new record type
        fields: (field name, declaration) pairs in wire order
        base: Record type to extend
        **class_vars: Record options such as record_encoding

    Returns:
        The compiled record class

    Raises:
        SchemaError: If a field name appears twice or the declarations are invalid

    Example:
        >>> Pair = make_record("Pair", [("foo", has_one("int16")), ("bar", has_one("int32"))])
    """
    namespace: dict[str, Any] = {}
    for field_name, decl in fields:
        if field_name in namespace:
            raise SchemaError(f"{name}: duplicate field name {field_name!r}")
        namespace[field_name] = decl

    clashes = namespace.keys() & class_vars.keys()
    if clashes:
        raise SchemaError(f"{name}: {sorted(clashes)} given both as fields and options")
    namespace.update(class_vars)
    return type(name, (base,), namespace)
