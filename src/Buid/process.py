"""Per-process BUID generator.

One ``Process`` owns a monotonic internal clock and a 6-bit cyclic counter.
For any number of threads sharing one instance, every ID it returns is
distinct and the embedded time never goes backwards, even when callers hand
in timestamps from a clock that was adjusted back.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import datetime

import structlog

from Buid import layout
from Buid.config import Settings, load_settings
from Buid.identifier import ID
from Buid.metrics import inc_counter, observe_histogram

log = structlog.get_logger()

_SPIN_BUCKETS = [1, 10, 100, 1000, 10_000, 100_000]


class Process:
    """A generation context identified by a 16-bit process id.

    Args:
        process_id: unique among all concurrently active generators.
        clock: returns the current time as Unix nanoseconds; defaults to
            ``time.time_ns``.
    """

    def __init__(self, process_id: int, *, clock: Callable[[], int] | None = None):
        if not 0 <= process_id <= layout.MAX_PROCESS_ID:
            raise ValueError(f"process id {process_id} outside 0..{layout.MAX_PROCESS_ID}")
        self._id = process_id
        self._clock = clock or time.time_ns
        self._lock = threading.Lock()
        # Start one nanosecond ahead so a restart within the same nanosecond
        # cannot reissue an ID of the previous incarnation.
        self._t = layout.internal_time(self._clock() + 1)
        if self._t < 0:
            raise ValueError("clock reports a time before the BUID epoch")
        self._counter = 0
        log.info("buid.process.created", process_id=process_id)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs) -> Process:
        settings = settings or load_settings()
        return cls(settings.process_id, **kwargs)

    @property
    def id(self) -> int:
        return self._id

    def new_id(self, shard: int, timestamp: int | datetime | None = None) -> ID:
        """Generate a new ID for ``shard`` at ``timestamp``.

        ``timestamp`` is Unix nanoseconds or a datetime; None reads the clock.
        May spin briefly when 64 IDs were already issued for the claimed
        nanosecond; it never fails.
        """
        if not 0 <= shard <= layout.MAX_SHARD_INDEX:
            raise ValueError(f"shard index {shard} outside 0..{layout.MAX_SHARD_INDEX}")
        if timestamp is None:
            ts = layout.internal_time(self._clock())
        else:
            ts = layout.internal_time(layout.to_unix_nanos(timestamp))

        # 1. a later ts is adopted and resets the counter
        # 2. an equal or earlier ts keeps the internal time and bumps the counter
        # 3. an exhausted counter waits for the clock to pass the internal time
        # 4. the internal time never rewinds
        spins = 0
        with self._lock:
            while True:
                if ts > self._t:
                    self._t = ts
                    self._counter = 0
                elif self._counter > layout.MAX_COUNTER:
                    spins += 1
                    ts = layout.internal_time(self._clock())
                    continue
                break
            t = self._t
            counter = self._counter
            self._counter += 1

        if spins:
            inc_counter("buid.process.counter_exhausted")
            observe_histogram("buid.process.spin_reads", spins, buckets=_SPIN_BUCKETS)

        hour, minute, second, nano = layout.decompose(t)
        return ID(
            layout.pack(
                layout.Fields(
                    shard_index=shard,
                    hour=hour,
                    minute=minute,
                    second=second,
                    nano=nano,
                    counter=counter,
                    process=self._id,
                )
            )
        )
