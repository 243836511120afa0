"""Unit tests for record instances."""

from __future__ import annotations

import copy
import datetime
import io

import pytest
from pydantic import ValidationError

from recblock import DecodeError, Record, UnknownFieldError, has_one


class Pair(Record):
    """Two plain integers."""

    foo = has_one("int16")
    bar = has_one("int32")


class KeyedPair(Record):
    """Pair whose first field is a key."""

    foo = has_one("int16", key=42)
    bar = has_one("int32")


class Named(Record):
    """Integers around a null-padded string."""

    foo = has_one("int16")
    name = has_one("string", length=20)
    bar = has_one("int32")


class WideNamed(Record):
    """Integers around a UTF-16 string."""

    foo = has_one("int16")
    name = has_one("utf16", length=20)
    bar = has_one("int32")


class Packed(Record):
    """Integers around a packed decimal."""

    foo = has_one("int16")
    age = has_one("packed", length=3)
    bar = has_one("int32")


class Defaults(Record):
    """Fields with declared defaults."""

    foo = has_one("int16", default=7)
    bar = has_one("int16")
    text = has_one("string", length=20, default="troaeipo")


class Dated(Record):
    """Packed date and timestamps."""

    day = has_one("date")
    stamp = has_one("time")
    minute = has_one("time_hhmm")


class FlatFile(Record):
    """Space-padded text followed by null-padded text."""

    name = has_one("sstring", length=10)
    last = has_one("string", length=5)


class FlatFileChild(FlatFile):
    """Subclass adding no fields."""


class TestRecordBasics:
    """Test field access on fresh records."""

    def test_assign_and_read(self) -> None:
        """Test assigned values read back."""
        pair = Pair()
        pair.foo = 32
        pair.bar = 24
        assert pair.foo == 32
        assert pair.bar == 24

    def test_keyword_construction(self) -> None:
        """Test values passed to the constructor."""
        pair = Pair(foo=32, bar=24)
        assert (pair.foo, pair.bar) == (32, 24)

    def test_unset_reads_none(self) -> None:
        """Test unset fields without defaults read None."""
        assert Pair().foo is None

    def test_key_auto_populated(self) -> None:
        """Test key fields start out holding their key."""
        record = KeyedPair()
        assert record.foo == 42

    def test_unknown_field(self) -> None:
        """Test undeclared names raise UnknownFieldError."""
        pair = Pair()
        with pytest.raises(UnknownFieldError):
            pair.baz = 1
        with pytest.raises(UnknownFieldError):
            pair.baz
        with pytest.raises(AttributeError):
            Pair(baz=1)

    def test_methods_not_assignable(self) -> None:
        """Test methods and class settings cannot be replaced on an instance."""
        pair = Pair(foo=1, bar=2)
        expected = pair.to_bytes()
        for name in ("to_bytes", "clone", "record_encoding"):
            with pytest.raises(UnknownFieldError):
                setattr(pair, name, 1)
        assert pair.to_bytes() == expected
        assert pair.clone() == pair

    def test_assignment_validated(self) -> None:
        """Test assignments are checked against the field type."""
        pair = Pair()
        with pytest.raises(ValidationError):
            pair.foo = 40000
        with pytest.raises(ValidationError):
            pair.foo = "many"

    def test_equality(self) -> None:
        """Test records compare by type and field values."""
        assert Pair(foo=1, bar=2) == Pair(foo=1, bar=2)
        assert Pair(foo=1, bar=2) != Pair(foo=1, bar=3)
        assert Pair() != KeyedPair()

    def test_repr(self) -> None:
        """Test repr lists fields in order."""
        assert repr(Pair(foo=1, bar=2)) == "Pair(foo=1, bar=2)"

    def test_to_dict(self) -> None:
        """Test conversion to plain data."""
        assert Named(foo=1, name="x", bar=2).to_dict() == {"foo": 1, "name": "x", "bar": 2}


class TestRoundTrip:
    """Test encoding then decoding records."""

    def test_keyed_round_trip(self) -> None:
        """Test the key field is encoded and decoded."""
        record = KeyedPair(bar=21)
        data = record.to_bytes()
        assert data == b"\x00\x2a\x00\x00\x00\x15"

        decoded = KeyedPair(data)
        assert decoded.foo == 42
        assert decoded.bar == 21

        stream = io.BytesIO(data)
        decoded = KeyedPair(stream)
        assert decoded.bar == 21
        assert stream.tell() == 6

    def test_fixed_string(self) -> None:
        """Test null-padded strings keep trailing spaces."""
        record = Named(foo=1, name="Patrick ", bar=42)
        data = record.to_bytes()
        assert len(data) == 2 + 20 + 4

        decoded = Named(data)
        assert (decoded.foo, decoded.name, decoded.bar) == (1, "Patrick ", 42)

    def test_utf16(self) -> None:
        """Test UTF-16 fields use two bytes per character."""
        record = WideNamed(foo=1, name="Patrick ", bar=42)
        data = record.to_bytes()
        assert len(data) == 2 + 20 * 2 + 4
        assert WideNamed(data).name == "Patrick "

    def test_packed_number(self) -> None:
        """Test packed decimals between integers."""
        record = Packed(foo=7, age=32, bar=3)
        data = record.to_bytes()
        assert len(data) == 2 + 2 + 4

        decoded = Packed(data)
        assert (decoded.foo, decoded.age, decoded.bar) == (7, 32, 3)

    def test_unset_packed_decodes_zero(self) -> None:
        """Test an unset packed field encodes as zero."""
        assert Packed(Packed().to_bytes()).age == 0

    def test_dates(self, birthday: datetime.date, timestamp: datetime.datetime) -> None:
        """Test packed calendar fields."""
        record = Dated(day=birthday, stamp=timestamp, minute=timestamp)
        data = record.to_bytes()
        assert len(data) == 4 + 7 + 6

        decoded = Dated(data)
        assert decoded.day == birthday
        assert decoded.stamp == timestamp
        assert decoded.minute == timestamp.replace(second=0)

    def test_null_dates(self) -> None:
        """Test unset calendar fields decode to None."""
        decoded = Dated(Dated().to_bytes())
        assert decoded.day is None
        assert decoded.stamp is None
        assert decoded.minute is None

    def test_space_string(self) -> None:
        """Test space-padded text is stripped on decode."""
        record = FlatFile(b"Name      Last ")
        assert record.name == "Name"
        assert record.last == "Last "

    def test_subclass_decodes_inherited_fields(self) -> None:
        """Test subclasses decode their parent's layout."""
        record = FlatFileChild(b"Name      Last ")
        assert record.name == "Name"

    def test_trailing_bytes_left_unread(self, pair_bytes: bytes) -> None:
        """Test decoding stops after the record's own bytes."""
        stream = io.BytesIO(pair_bytes + b"\xff\xff")
        Pair(stream)
        assert stream.read() == b"\xff\xff"


class TestDefaults:
    """Test default values and explicit clearing."""

    def test_defaults_reported(self) -> None:
        """Test unset fields report their defaults."""
        record = Defaults()
        assert record.foo == 7
        assert record.bar is None
        assert record.text == "troaeipo"

    def test_clear_overrides_default(self) -> None:
        """Test assigning None clears a field to the type's zero form."""
        record = Defaults()
        record.foo = None
        assert record.foo is None
        record.bar = 3

        decoded = Defaults(record.to_bytes())
        assert decoded.foo == 0
        assert decoded.bar == 3
        assert decoded.text == "troaeipo"


class TestFailedDecode:
    """Test fail-fast and attempt decode."""

    def test_key_mismatch_raises(self) -> None:
        """Test a wrong key raises DecodeError."""
        data = b"\x00\x00" + KeyedPair(bar=21).to_bytes()[2:]
        with pytest.raises(DecodeError, match="KeyedPair.foo"):
            KeyedPair(data)

    def test_try_decode_reports_failure(self) -> None:
        """Test try_decode returns False instead of raising."""
        good = KeyedPair(bar=21).to_bytes()
        bad = b"\x00" + good[1:]

        record = KeyedPair()
        assert record.try_decode(bad) is False

        stream = io.BytesIO(good)
        assert record.try_decode(stream) is True
        assert record.foo == 42
        assert record.bar == 21
        assert stream.tell() == 6

    def test_truncated(self) -> None:
        """Test truncated data raises DecodeError."""
        with pytest.raises(DecodeError, match="Truncated"):
            Pair(b"\x00\x01\x00")
        assert Pair().try_decode(b"\x00") is False


class TestClone:
    """Test independent copies."""

    def test_clone_scalars(self) -> None:
        """Test changing a clone leaves the original alone."""
        original = Pair(foo=32, bar=24)
        twin = original.clone()
        assert (twin.foo, twin.bar) == (32, 24)

        twin.foo = 42
        assert twin.foo == 42
        assert original.foo == 32

    def test_clone_keeps_unset_state(self) -> None:
        """Test unset fields stay unset in the clone."""
        record = Defaults()
        twin = record.clone()
        assert twin.foo == 7
        assert twin == record

    def test_copy_module(self) -> None:
        """Test copy.copy and copy.deepcopy produce independent records."""
        original = Pair(foo=1, bar=2)
        for twin in (copy.copy(original), copy.deepcopy(original)):
            assert twin == original
            assert twin is not original
