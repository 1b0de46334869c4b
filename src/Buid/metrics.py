"""Minimal in-process metrics shim for counters and histograms.

This is intentionally simple; production can export ``get_counters()`` to a
real backend. Generation runs on caller threads, so every mutation goes
through a module lock.

Histograms use fixed or custom ``<=`` buckets and are flattened into counters
by ``get_counters()`` to keep the exported shape a single flat dict.
"""

from __future__ import annotations

import threading
from collections import defaultdict

_lock = threading.Lock()
_counters: dict[str, int] = defaultdict(int)
_histograms: dict[str, dict[str, int]] = {}
_hist_sums: dict[str, int] = defaultdict(int)
_hist_counts: dict[str, int] = defaultdict(int)

DEFAULT_BUCKETS = [1, 2, 5, 10, 20, 50, 100, 250, 500, 1000, 2000, 5000]


def inc_counter(name: str, value: int = 1) -> None:
    with _lock:
        _counters[name] += int(value)


def get_counter(name: str) -> int:
    with _lock:
        return _counters.get(name, 0)


def reset_counters() -> None:
    with _lock:
        _counters.clear()
        _histograms.clear()
        _hist_sums.clear()
        _hist_counts.clear()


def get_counters() -> dict[str, int]:
    """Return a shallow copy of all counters for diagnostics."""
    with _lock:
        out = dict(_counters)
        # Flatten histograms as counters for easy scraping
        for name, buckets in _histograms.items():
            for b_lbl, cnt in buckets.items():
                out[f"histo.{name}.{b_lbl}"] = cnt
            out[f"histo.{name}.sum"] = _hist_sums.get(name, 0)
            out[f"histo.{name}.count"] = _hist_counts.get(name, 0)
    return out


def observe_histogram(name: str, value: int, *, buckets: list[int] | None = None) -> None:
    """Record a value in a histogram with <=-style buckets.

    - buckets: upper bounds, defaulting to ``DEFAULT_BUCKETS``.
    - Values above the last bound land in an overflow bucket 'gt_{last}'.
    """
    if buckets is None:
        buckets = DEFAULT_BUCKETS
    key = f"gt_{buckets[-1]}"
    for ub in buckets:
        if value <= ub:
            key = f"le_{ub}"
            break
    with _lock:
        h = _histograms.setdefault(name, {})
        h[key] = h.get(key, 0) + 1
        _hist_sums[name] += int(value)
        _hist_counts[name] += 1
