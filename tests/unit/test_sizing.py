"""Unit tests for size calculation utilities."""

from __future__ import annotations

import pytest

from recblock import (
    Record,
    SchemaError,
    encoded_size,
    field_layout,
    field_sizes,
    has_counted_array,
    has_one,
)


class Header(Record):
    """Fixed-width record."""

    rtype = has_one("int16", key=42)
    name = has_one("sstring", length=10)
    born = has_one("date")


class Bundle(Record):
    """Variable-width record."""

    count = has_one("uint8")
    headers = has_counted_array("uint8", [Header])
    crc = has_one("uint16")


class TestEncodedSize:
    """Test encoded_size()."""

    def test_class(self) -> None:
        """Test fixed-width classes are measured from the schema."""
        assert encoded_size(Header) == 2 + 10 + 4

    def test_variable_class(self) -> None:
        """Test variable-width classes need an instance."""
        with pytest.raises(SchemaError, match="variable-width"):
            encoded_size(Bundle)

    def test_instance(self) -> None:
        """Test instances are measured by encoding them."""
        bundle = Bundle()
        bundle.headers.extend([Header(), Header()])
        assert encoded_size(bundle) == 1 + 1 + 16 * 2 + 2


class TestFieldSizes:
    """Test field_sizes()."""

    def test_class(self) -> None:
        """Test static widths."""
        assert field_sizes(Bundle) == {"count": 1, "headers": None, "crc": 2}

    def test_instance(self) -> None:
        """Test actual widths."""
        bundle = Bundle()
        bundle.headers.append(Header())
        assert field_sizes(bundle) == {"count": 1, "headers": 17, "crc": 2}


class TestFieldLayout:
    """Test field_layout()."""

    def test_offsets(self) -> None:
        """Test offsets accumulate until a variable-width field."""
        rows = field_layout(Bundle)
        assert [(row.name, row.offset, row.width) for row in rows] == [
            ("count", 0, 1),
            ("headers", 1, None),
            ("crc", None, 2),
        ]
        assert rows[1].description.startswith("counted_array<uint8>")

    def test_instance_uses_class(self) -> None:
        """Test instances report the static layout."""
        assert field_layout(Header()) == field_layout(Header)
