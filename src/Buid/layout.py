"""Bit layout of a BUID (Bipartite Unique Identifier).

A BUID is 128 bits made of two big-endian 64-bit halves, shard and key::

    shard:  | shard-index:16 | reserved:16 | hours:32                          |
    key:    | minute:6 | second:6 | nanosecond:30 | counter:6 | process:16    |

Every field is stored most-significant time unit first, so byte-wise order of
whole IDs, and of each half on its own, follows the order of the instants that
produced them.

This module is pure bit arithmetic: nothing here holds state or validates that
a field fits its range. Field values come from ``Buid.process.Process`` and
are masked to their widths while packing.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

SECOND_NS = 1_000_000_000
MINUTE_NS = 60 * SECOND_NS
HOUR_NS = 60 * MINUTE_NS

ID_SIZE = 16
HALF_SIZE = 8

MAX_SHARD_INDEX = 0xFFFF
MAX_PROCESS_ID = 0xFFFF
MAX_COUNTER = 0x3F

_HOUR_MASK = 0xFFFFFFFF
_MINUTE_MASK = 0x3F
_SECOND_MASK = 0x3F
_NANO_MASK = (1 << 30) - 1

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Bespoke epoch: 32 bits of hours from here last for roughly 490,000 years.
EPOCH = datetime(2017, 10, 24, tzinfo=timezone.utc)
EPOCH_NS = int((EPOCH - _UNIX_EPOCH).total_seconds()) * SECOND_NS

_HALVES = struct.Struct(">QQ")


def internal_time(unix_ns: int) -> int:
    """Unix nanoseconds -> nanoseconds since the BUID epoch."""
    return unix_ns - EPOCH_NS


def external_time(t: int) -> int:
    """Nanoseconds since the BUID epoch -> Unix nanoseconds."""
    return t + EPOCH_NS


def to_unix_nanos(timestamp: int | datetime) -> int:
    """Normalize a timestamp to integer nanoseconds since the Unix epoch.

    Integers are taken as Unix nanoseconds already. Naive datetimes are
    interpreted as UTC. Anything else, float seconds included, is a TypeError.
    """
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return ((timestamp - _UNIX_EPOCH) // timedelta(microseconds=1)) * 1000
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise TypeError(
            f"timestamp must be int Unix nanoseconds or datetime, got {type(timestamp).__name__}"
        )
    return timestamp


def from_unix_nanos(unix_ns: int) -> datetime:
    """Unix nanoseconds -> aware UTC datetime (truncated to microseconds)."""
    return _UNIX_EPOCH + timedelta(microseconds=unix_ns // 1000)


def decompose(t: int) -> tuple[int, int, int, int]:
    """Split epoch-relative nanoseconds into (hour, minute, second, nano)."""
    hour = t // HOUR_NS
    minute = (t % HOUR_NS) // MINUTE_NS
    second = (t % MINUTE_NS) // SECOND_NS
    nano = t % SECOND_NS
    return hour, minute, second, nano


@dataclass(frozen=True)
class Fields:
    shard_index: int
    hour: int
    minute: int
    second: int
    nano: int
    counter: int
    process: int

    def internal_time(self) -> int:
        return (
            self.hour * HOUR_NS
            + self.minute * MINUTE_NS
            + self.second * SECOND_NS
            + self.nano
        )


def pack(fields: Fields) -> bytes:
    """Pack ``fields`` into the 16-byte BUID layout."""
    shard = ((fields.shard_index & MAX_SHARD_INDEX) << 48) | (fields.hour & _HOUR_MASK)
    key = (
        ((fields.minute & _MINUTE_MASK) << 58)
        | ((fields.second & _SECOND_MASK) << 52)
        | ((fields.nano & _NANO_MASK) << 22)
        | ((fields.counter & MAX_COUNTER) << 16)
        | (fields.process & MAX_PROCESS_ID)
    )
    return _HALVES.pack(shard, key)


def unpack(raw: bytes) -> Fields:
    """Recover every field from a 16-byte BUID. Reserved bits are ignored."""
    shard, key = _HALVES.unpack(raw)
    return Fields(
        shard_index=shard >> 48,
        hour=shard & _HOUR_MASK,
        minute=(key >> 58) & _MINUTE_MASK,
        second=(key >> 52) & _SECOND_MASK,
        nano=(key >> 22) & _NANO_MASK,
        counter=(key >> 16) & MAX_COUNTER,
        process=key & MAX_PROCESS_ID,
    )


def split(raw: bytes) -> tuple[bytes, bytes]:
    return raw[:HALF_SIZE], raw[HALF_SIZE:]


def join(shard: bytes, key: bytes) -> bytes:
    return shard + key


__all__ = [
    "EPOCH",
    "EPOCH_NS",
    "Fields",
    "HALF_SIZE",
    "HOUR_NS",
    "ID_SIZE",
    "MAX_COUNTER",
    "MAX_PROCESS_ID",
    "MAX_SHARD_INDEX",
    "MINUTE_NS",
    "SECOND_NS",
    "decompose",
    "external_time",
    "from_unix_nanos",
    "internal_time",
    "join",
    "pack",
    "split",
    "to_unix_nanos",
    "unpack",
]
