"""Compiled record layouts.

A RecordSchema is built once per record type, when the class is created,
and shared read-only by every instance of that type. It fixes the wire order
of the fields and precomputes everything the engine needs: static widths,
the trailing byte counts delimited lists must leave unread, and where a
tagged-dispatch key sits inside the record.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Iterable, Iterator, Sequence

from ..exceptions import SchemaError, UnknownFieldError
from .fields import FieldDecl, ScalarField


class RecordSchema:
    """Immutable, ordered field table of one record type.

    Example:
        >>> schema = Pair.__record_schema__
        >>> schema.names
        ('foo', 'bar')
        >>> schema.fixed_width
        6
    """

    def __init__(self, record_type: type, fields: Sequence[FieldDecl]) -> None:
        """Initialize the schema from already bound field declarations.

        Args:
            record_type: Record class this schema describes
            fields: Field declarations in wire order

        Raises:
            SchemaError: If a field holding a delimited list, directly or through
                nested records, is followed by a variable-width field
        """
        self.record_type = record_type
        self.fields: tuple[FieldDecl, ...] = tuple(fields)
        self._by_name = MappingProxyType({field.name: field for field in self.fields})
        self.contains_list = any(field.contains_list() for field in self.fields)
        self._reserves = self._compute_reserves()
        self._key_probe, self._key_probe_error = self._find_key_probe()

        widths = [field.fixed_width() for field in self.fields]
        self.fixed_width: int | None = None if None in widths else sum(widths)  # type: ignore[arg-type]

    @classmethod
    def compile(
        cls,
        record_type: type,
        own_fields: Iterable[tuple[str, FieldDecl]],
        base: RecordSchema | None = None,
        reserved: Iterable[str] = (),
    ) -> RecordSchema:
        """Compile a record type's declarations, appending them to its base's.

        Args:
            record_type: Record class being created
            own_fields: (name, declaration) pairs declared by record_type itself
            base: Schema of the parent record type, whose fields come first
            reserved: Names that may not be used for fields

        Returns:
            RecordSchema for record_type

        Raises:
            SchemaError: On duplicate or reserved names, or invalid declarations
        """
        inherited = base.fields if base is not None else ()
        names = {field.name for field in inherited}
        reserved = frozenset(reserved)
        declared: list[FieldDecl] = []

        for name, decl in own_fields:
            if name in names:
                raise SchemaError(f"{record_type.__name__}: duplicate field name {name!r}")
            if name.startswith("_") or name in reserved:
                raise SchemaError(f"{record_type.__name__}: field name {name!r} is reserved")
            names.add(name)
            decl.bind(record_type, name)
            declared.append(decl)

        return cls(record_type, (*inherited, *declared))

    def _compute_reserves(self) -> tuple[int, ...]:
        reserves: list[int] = []
        trailing = 0
        variable_after: str | None = None

        for field in reversed(self.fields):
            if field.contains_list() and variable_after is not None:
                raise SchemaError(
                    f"{self.record_type.__name__}.{field.name}: a field holding a delimited list "
                    f"cannot be followed by the variable-width field {variable_after!r}"
                )
            reserves.append(trailing)
            width = field.fixed_width()
            if width is None:
                variable_after = field.name
            else:
                trailing += width

        reserves.reverse()
        return tuple(reserves)

    def _find_key_probe(self) -> tuple[tuple[int, ScalarField] | None, str | None]:
        offset = 0
        blocker: str | None = None
        for field in self.fields:
            if field.key is not None:
                if blocker is not None:
                    return None, (
                        f"{self.record_type.__name__}: key field {field.name!r} follows the "
                        f"variable-width field {blocker!r}"
                    )
                return (offset, field), None  # type: ignore[return-value]
            width = field.fixed_width()
            if width is None:
                blocker = blocker or field.name
            else:
                offset += width
        return None, None

    @property
    def key_probe(self) -> tuple[int, ScalarField] | None:
        """Byte offset and declaration of the first key field, if any.

        Raises:
            SchemaError: If the key cannot be located without decoding
        """
        if self._key_probe_error is not None:
            raise SchemaError(self._key_probe_error)
        return self._key_probe

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._by_name)

    def layout(self) -> Iterator[tuple[FieldDecl, int]]:
        """Yield each field with the byte count its trailing fields reserve."""
        return zip(self.fields, self._reserves)

    def field_widths(self) -> dict[str, int | None]:
        """Static width of each field (None for variable-width fields)."""
        return {field.name: field.fixed_width() for field in self.fields}

    def __getitem__(self, name: str) -> FieldDecl:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownFieldError(
                f"{self.record_type.__name__} has no field {name!r}"
            ) from None

    def __contains__(self, name: Any) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[FieldDecl]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        return f"RecordSchema({self.record_type.__name__}, fields={list(self.names)})"
