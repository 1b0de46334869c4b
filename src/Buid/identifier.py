"""Immutable BUID value types: ``ID`` and its two halves ``Shard`` and ``Key``.

Values wrap their raw big-endian bytes. Equality, hashing and ordering are
byte-wise and only defined between values of the same type, which is exactly
the order an ordered key-value store would give them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, ClassVar

from pydantic import GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema

from Buid import codec, layout

_ZERO_HALF = bytes(layout.HALF_SIZE)


@dataclass(frozen=True, order=True)
class _Binary:
    raw: bytes

    SIZE: ClassVar[int] = 0

    def __post_init__(self) -> None:
        if isinstance(self.raw, bytearray | memoryview):
            object.__setattr__(self, "raw", bytes(self.raw))
        if not isinstance(self.raw, bytes):
            raise TypeError(f"{type(self).__name__} expects bytes, got {type(self.raw).__name__}")
        if len(self.raw) != self.SIZE:
            raise ValueError(
                f"{type(self).__name__} requires {self.SIZE} bytes, got {len(self.raw)}"
            )

    @classmethod
    def parse(cls, text: str | bytes):
        """Decode the base-62 text form. Raises ``codec.FormatError``."""
        return cls(codec.decode(text, cls.SIZE))

    def is_zero(self) -> bool:
        return not any(self.raw)

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return codec.encode(self.raw)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"

    # pydantic: accept instances, raw bytes or text; serialize as text
    @classmethod
    def _coerce(cls, value: Any):
        if isinstance(value, cls):
            return value
        if isinstance(value, bytes | bytearray):
            return cls(bytes(value))
        if isinstance(value, str):
            return cls.parse(value)
        raise ValueError(f"cannot build {cls.__name__} from {type(value).__name__}")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, return_schema=core_schema.str_schema()
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        n = codec.text_length(cls.SIZE)
        return {
            "type": "string",
            "minLength": n,
            "maxLength": n,
            "pattern": f"^[0-9A-Za-z]{{{n}}}$",
        }


class Shard(_Binary):
    """Shard half: shard index and the hour-truncated generation time."""

    SIZE: ClassVar[int] = layout.HALF_SIZE

    def _fields(self) -> layout.Fields:
        return layout.unpack(layout.join(self.raw, _ZERO_HALF))

    @property
    def index(self) -> int:
        return self._fields().shard_index

    @property
    def unix_nanos(self) -> int:
        return layout.external_time(self._fields().internal_time())

    def time(self) -> datetime:
        return layout.from_unix_nanos(self.unix_nanos)


class Key(_Binary):
    """Key half: sub-hour time, counter and process id.

    A Key is unique within its shard and hour; the hour itself lives only in
    the Shard half.
    """

    SIZE: ClassVar[int] = layout.HALF_SIZE

    def _fields(self) -> layout.Fields:
        return layout.unpack(layout.join(_ZERO_HALF, self.raw))

    @property
    def offset_ns(self) -> int:
        """Nanoseconds elapsed since the top of the generation hour."""
        return self._fields().internal_time()

    def offset(self) -> timedelta:
        return timedelta(microseconds=self.offset_ns // 1000)

    @property
    def process(self) -> int:
        return self._fields().process

    @property
    def counter(self) -> int:
        return self._fields().counter


class ID(_Binary):
    """A full 128-bit BUID."""

    SIZE: ClassVar[int] = layout.ID_SIZE
    ZERO: ClassVar[ID]

    @classmethod
    def join(cls, shard: Shard, key: Key) -> ID:
        return cls(layout.join(shard.raw, key.raw))

    def split(self) -> tuple[Shard, Key]:
        shard, key = layout.split(self.raw)
        return Shard(shard), Key(key)

    def fields(self) -> layout.Fields:
        return layout.unpack(self.raw)

    @property
    def shard_index(self) -> int:
        return self.fields().shard_index

    @property
    def process(self) -> int:
        return self.fields().process

    @property
    def counter(self) -> int:
        return self.fields().counter

    @property
    def unix_nanos(self) -> int:
        """Embedded time as exact Unix nanoseconds."""
        return layout.external_time(self.fields().internal_time())

    def time(self) -> datetime:
        return layout.from_unix_nanos(self.unix_nanos)


ID.ZERO = ID(bytes(layout.ID_SIZE))


__all__ = ["ID", "Key", "Shard"]
