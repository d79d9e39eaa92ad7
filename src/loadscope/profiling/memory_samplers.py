"""Process memory readings for the profilers.

heap_sampler: bytes currently allocated by Python, as traced by
tracemalloc. Closest analogue to a managed-heap "used" figure. Reads 0
unless tracing is on; use tracing() to scope it.

rss_sampler: resident set size of this process, via psutil. Cheap and
always available, but includes allocator slack and shared pages.
"""
from __future__ import annotations

import contextlib
import tracemalloc
from typing import Iterator

import psutil

from loadscope.domain.types import Bytes


def heap_sampler() -> Bytes:
    """Current tracemalloc traced bytes (0 when not tracing)."""
    if not tracemalloc.is_tracing():
        return 0
    current, _peak = tracemalloc.get_traced_memory()
    return current


def rss_sampler() -> Bytes:
    """Resident set size of the current process in bytes."""
    return psutil.Process().memory_info().rss


@contextlib.contextmanager
def tracing() -> Iterator[None]:
    """Start tracemalloc for the block unless it is already running.

    Stops it on exit only if this block started it.
    """
    started = not tracemalloc.is_tracing()
    if started:
        tracemalloc.start()
    try:
        yield
    finally:
        if started:
            tracemalloc.stop()


SAMPLERS = {
    "heap": heap_sampler,
    "rss": rss_sampler,
}
