"""Measurement session: raw samples in, percentiles and rates out.

A session owns an ordered list of Samples and a start timestamp.
summary() derives a PerformanceSummary from a snapshot of them:

    ops/sec     = n / elapsed_ms * 1000
    error rate  = errors / n * 100
    pXX         = nearest-rank on an ascending copy of the durations

Nearest-rank means index = ceil(p/100 * n) - 1, clamped to [0, n-1].
There is no interpolation between ranks, so every reported percentile
is a duration that was actually observed.

Runners create one session per test invocation. Nothing is shared
between two tests, even on the same runner instance.
"""
from __future__ import annotations

import math
import time
from collections import defaultdict, deque
from typing import Callable

from loadscope.domain.errors import InsufficientDataError, OperationError
from loadscope.domain.results import PerformanceSummary, Sample
from loadscope.domain.types import MemorySampler
from loadscope.profiling.memory_samplers import rss_sampler


def percentile(sorted_values: list[float], p: float) -> float:
    """Nearest-rank percentile of an ascending list.

    Raises InsufficientDataError on an empty list rather than
    inventing a zero.
    """
    n = len(sorted_values)
    if n == 0:
        raise InsufficientDataError("percentile of an empty sample set")
    index = math.ceil(p / 100 * n) - 1
    index = min(max(index, 0), n - 1)
    return sorted_values[index]


class MeasurementSession:
    """Accumulates Samples for one logical test.

    Args:
        memory_sampler: zero-arg callable returning process bytes, read
            when a summary is produced. Defaults to RSS via psutil.
        clock: seconds-based monotonic clock (injectable for tests).
    """

    __slots__ = ("_samples", "_start", "_memory_sampler", "_clock")

    def __init__(
        self,
        memory_sampler: MemorySampler | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._samples: deque[Sample] = deque()
        self._memory_sampler = memory_sampler or rss_sampler
        self._clock = clock
        self._start = clock()

    def start(self) -> None:
        """Drop all samples and restart the wall clock. Safe to call anytime."""
        self._samples = deque()
        self._start = self._clock()

    def record(
        self,
        duration_ms: float,
        is_error: bool = False,
        error: OperationError | None = None,
    ) -> None:
        """Append one sample. duration_ms is not validated or clamped."""
        self._samples.append(Sample(duration_ms, is_error or error is not None, error))

    @property
    def samples(self) -> list[Sample]:
        """Samples in insertion order (a copy)."""
        return list(self._samples)

    @property
    def sample_count(self) -> int:
        return len(self._samples)

    @property
    def error_count(self) -> int:
        return sum(1 for s in self._samples if s.is_error)

    def elapsed_ms(self) -> float:
        return (self._clock() - self._start) * 1000

    def summary(self) -> PerformanceSummary:
        """Compute aggregates. Raises InsufficientDataError when empty."""
        samples = list(self._samples)
        n = len(samples)
        if n == 0:
            raise InsufficientDataError("No measurements recorded")

        durations = sorted(s.duration_ms for s in samples)
        errors = sum(1 for s in samples if s.is_error)
        total_ms = self.elapsed_ms()
        ops = n / total_ms * 1000 if total_ms > 0 else 0.0

        return PerformanceSummary(
            total_duration_ms=total_ms,
            memory_bytes=self._memory_sampler(),
            ops_per_second=ops,
            error_rate_pct=errors / n * 100,
            p50=percentile(durations, 50),
            p95=percentile(durations, 95),
            p99=percentile(durations, 99),
            sample_count=n,
        )


class Stopwatch:
    """Named marks for ad-hoc timing inside a test.

        t0 = sw.mark("batch_insert")
        ...
        elapsed = sw.measure("batch_insert", t0)

    Every measurement is kept per label.
    """

    __slots__ = ("_clock", "_marks", "_measurements")

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._marks: dict[str, float] = {}
        self._measurements: defaultdict[str, list[float]] = defaultdict(list)

    def mark(self, label: str) -> float:
        now = self._clock()
        self._marks[label] = now
        return now

    def measure(self, label: str, start: float | None = None) -> float:
        """Elapsed ms since ``start`` (or the last mark for ``label``)."""
        if start is None:
            try:
                start = self._marks[label]
            except KeyError:
                raise KeyError(f"No mark named {label!r}") from None
        elapsed = (self._clock() - start) * 1000
        self._measurements[label].append(elapsed)
        return elapsed

    def measurements(self, label: str) -> list[float]:
        return list(self._measurements.get(label, ()))

    @property
    def labels(self) -> list[str]:
        return sorted(self._measurements)
