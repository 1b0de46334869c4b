#!/usr/bin/env python
"""Throughput check for Process.new_id.

Usage examples:

  PYTHONPATH=./src python scripts/bench_process.py
  PYTHONPATH=./src python scripts/bench_process.py --count 200000 --threads 8

Runs a sequential pass with synthetic timestamps one nanosecond apart, then a
parallel pass where every thread reads the wall clock, and reports the highest
counter value seen (how many IDs shared one claimed nanosecond).
"""
from __future__ import annotations

import argparse
import threading
import time

from Buid import Process
from Buid.metrics import get_counters, reset_counters


def bench_sequential(count: int) -> float:
    process = Process(1)
    t = time.time_ns()
    start = time.perf_counter()
    for _ in range(count):
        process.new_id(2, t)
        t += 1
    return time.perf_counter() - start


def bench_parallel(count: int, threads: int) -> tuple[float, int]:
    process = Process(12)
    max_counters = [0] * threads

    def worker(slot: int) -> None:
        c = 0
        for _ in range(count):
            _, key = process.new_id(1).split()
            if key.counter > c:
                c = key.counter
        max_counters[slot] = c

    workers = [threading.Thread(target=worker, args=(i,)) for i in range(threads)]
    start = time.perf_counter()
    for w in workers:
        w.start()
    for w in workers:
        w.join()
    return time.perf_counter() - start, max(max_counters)


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark BUID generation")
    parser.add_argument("--count", type=int, default=100_000, help="IDs per run (per thread)")
    parser.add_argument("--threads", type=int, default=4, help="Threads in the parallel run")
    args = parser.parse_args()

    reset_counters()
    elapsed = bench_sequential(args.count)
    print(f"sequential: {args.count} ids in {elapsed:.3f}s ({elapsed / args.count * 1e9:.0f} ns/id)")

    elapsed, max_counter = bench_parallel(args.count, args.threads)
    total = args.count * args.threads
    print(f"parallel:   {total} ids in {elapsed:.3f}s ({elapsed / total * 1e9:.0f} ns/id)")
    print(f"max counter is {max_counter}")
    for name, value in sorted(get_counters().items()):
        print(f"  {name}={value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
