"""Tests for the ID / Shard / Key value types."""

from datetime import timedelta

import pytest
from pydantic import BaseModel, ValidationError

from Buid import ID, FormatError, Key, Shard, layout
from Buid.layout import Fields


def _make(shard_index=42, t=None, counter=3, process=12) -> ID:
    if t is None:
        t = 419_112 * layout.HOUR_NS + 17 * layout.MINUTE_NS + 4 * layout.SECOND_NS + 123_456_789
    hour, minute, second, nano = layout.decompose(t)
    return ID(layout.pack(Fields(shard_index, hour, minute, second, nano, counter, process)))


class TestConstruction:
    def test_wrong_size_rejected(self):
        with pytest.raises(ValueError):
            ID(bytes(15))
        with pytest.raises(ValueError):
            Key(bytes(16))
        with pytest.raises(TypeError):
            Shard("0" * 11)

    def test_bytearray_normalized(self):
        id_ = ID(bytearray(16))
        assert isinstance(id_.raw, bytes)
        assert id_ == ID.ZERO

    def test_immutable(self):
        id_ = _make()
        with pytest.raises(AttributeError):
            id_.raw = bytes(16)  # type: ignore[misc]


class TestAccessors:
    def test_id_fields(self):
        t = 419_112 * layout.HOUR_NS + 17 * layout.MINUTE_NS + 4 * layout.SECOND_NS + 123_456_789
        id_ = _make(shard_index=42, t=t, counter=3, process=12)
        assert id_.shard_index == 42
        assert id_.counter == 3
        assert id_.process == 12
        assert id_.unix_nanos == layout.external_time(t)
        assert id_.time() == layout.from_unix_nanos(layout.external_time(t))

    def test_split_join(self):
        id_ = _make()
        shard, key = id_.split()
        assert bytes(shard) == bytes(id_)[:8]
        assert bytes(key) == bytes(id_)[8:]
        assert ID.join(shard, key) == id_

    def test_shard_accessors(self):
        t = 419_112 * layout.HOUR_NS + 17 * layout.MINUTE_NS + 5
        shard, _ = _make(shard_index=42, t=t).split()
        assert shard.index == 42
        hour_start = layout.external_time(419_112 * layout.HOUR_NS)
        assert shard.unix_nanos == hour_start
        assert shard.time() == layout.from_unix_nanos(hour_start)

    def test_key_accessors(self):
        offset = 17 * layout.MINUTE_NS + 4 * layout.SECOND_NS + 123_456_789
        _, key = _make(t=419_112 * layout.HOUR_NS + offset, counter=9, process=65535).split()
        assert key.offset_ns == offset
        assert key.offset() == timedelta(minutes=17, seconds=4, microseconds=123_456)
        assert key.counter == 9
        assert key.process == 65535


class TestZero:
    def test_zero_value(self):
        assert ID.ZERO.is_zero()
        assert str(ID.ZERO) == "0" * 22

    def test_any_single_bit_makes_nonzero(self):
        for bit in range(128):
            raw = (1 << bit).to_bytes(16, "big")
            assert not ID(raw).is_zero()

    def test_halves(self):
        assert Shard(bytes(8)).is_zero()
        assert not Key(bytes(7) + b"\x01").is_zero()


class TestTextForm:
    def test_id_round_trip(self):
        id_ = _make()
        text = str(id_)
        assert len(text) == 22
        assert ID.parse(text) == id_
        assert repr(id_) == f"ID('{text}')"

    def test_key_round_trip(self):
        _, key = _make().split()
        text = str(key)
        assert len(text) == 11
        assert Key.parse(text) == key

    def test_shard_round_trip(self):
        shard, _ = _make().split()
        assert Shard.parse(str(shard)) == shard

    def test_parse_errors(self):
        with pytest.raises(FormatError):
            ID.parse("0" * 31)
        with pytest.raises(FormatError):
            Key.parse("0" * 10 + "!")


class TestOrdering:
    def test_byte_wise_ordering(self):
        early = _make(t=419_112 * layout.HOUR_NS)
        late = _make(t=419_112 * layout.HOUR_NS + 1)
        assert early < late
        assert str(early) < str(late)
        assert sorted([late, early]) == [early, late]

    def test_hashable_and_equal_by_bytes(self):
        a = _make()
        b = ID(bytes(a))
        assert a == b
        assert len({a, b}) == 1

    def test_different_types_do_not_compare(self):
        shard, key = ID.ZERO.split()
        assert shard != key
        with pytest.raises(TypeError):
            _ = shard < key  # noqa: B015


class Record(BaseModel):
    id: ID
    key: Key | None = None


class TestPydantic:
    def test_validate_from_text_bytes_and_instance(self):
        id_ = _make()
        _, key = id_.split()
        assert Record(id=str(id_)).id == id_
        assert Record(id=bytes(id_)).id == id_
        assert Record(id=id_, key=str(key)).key == key

    def test_serializes_to_text(self):
        id_ = _make()
        _, key = id_.split()
        rec = Record(id=id_, key=key)
        assert rec.model_dump() == {"id": str(id_), "key": str(key)}
        again = Record.model_validate_json(rec.model_dump_json())
        assert again == rec

    def test_invalid_input(self):
        with pytest.raises(ValidationError):
            Record(id="not-a-buid")
        with pytest.raises(ValidationError):
            Record(id=bytes(3))
        with pytest.raises(ValidationError):
            Record(id=12345)

    def test_json_schema_is_fixed_length_text(self):
        schema = Record.model_json_schema()
        props = schema["properties"]
        id_schema = props["id"]
        assert id_schema["type"] == "string"
        assert id_schema["minLength"] == id_schema["maxLength"] == 22
        assert id_schema["pattern"] == "^[0-9A-Za-z]{22}$"
        key_schema = next(s for s in props["key"]["anyOf"] if s.get("type") == "string")
        assert key_schema["minLength"] == key_schema["maxLength"] == 11
        assert schema["required"] == ["id"]

    def test_json_schema_serialization_mode(self):
        schema = Record.model_json_schema(mode="serialization")
        assert schema["properties"]["id"]["type"] == "string"
