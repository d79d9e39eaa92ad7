"""Memory trend profiler with a directional leak heuristic.

Sample memory once up front, then once after each of `iterations`
calls. From the per-iteration samples:

    final    = last sample
    average  = mean of the samples
    growth   = final - initial
    peak     = max(initial, samples)

Leak heuristic: take the trailing ceil(iterations * 0.25) samples and
walk consecutive pairs. +1 for every rise, -1 for every fall, 0 for no
change. A possible leak is flagged when that counter exceeds 0.7 times
the window length. It is a trend signal, not a statistical test; the
0.25 window and 0.7 threshold are fixed.

Calling gc.collect() after each sample is a hint only. Correctness
does not depend on it.
"""
from __future__ import annotations

import contextlib
import gc
import logging
import math
from typing import Callable, Sequence

from loadscope.domain.config import MemoryProfileConfig
from loadscope.domain.operation import Operation, as_operation
from loadscope.domain.results import MemoryProfileResult
from loadscope.domain.types import MemorySampler
from loadscope.profiling.memory_samplers import heap_sampler, tracing
from loadscope.profiling.timing import timed_call

log = logging.getLogger(__name__)

LEAK_WINDOW_FRACTION = 0.25
LEAK_THRESHOLD = 0.7


def growth_trend(window: Sequence[int]) -> int:
    """Signed count of rising minus falling consecutive steps."""
    trend = 0
    for prev, cur in zip(window, window[1:]):
        if cur > prev:
            trend += 1
        elif cur < prev:
            trend -= 1
    return trend


def detect_leak(samples: Sequence[int], iterations: int) -> bool:
    """Apply the trailing-quarter trend heuristic to per-iteration samples."""
    window_len = math.ceil(iterations * LEAK_WINDOW_FRACTION)
    if window_len == 0:
        return False
    window = list(samples[-window_len:])
    return growth_trend(window) > LEAK_THRESHOLD * len(window)


class MemoryTrendProfiler:
    """Repeatedly invoke an operation while sampling process memory.

    Args:
        sampler: zero-arg callable returning bytes. When omitted, the
            tracemalloc heap reading is used and tracing is switched on
            for the duration of the run.
        gc_hint: called after each sample when the config asks for it.
    """

    def __init__(
        self,
        sampler: MemorySampler | None = None,
        gc_hint: Callable[[], object] = gc.collect,
    ) -> None:
        self._sampler = sampler
        self._gc_hint = gc_hint

    async def run(
        self,
        operation: Operation,
        config: MemoryProfileConfig | None = None,
    ) -> MemoryProfileResult:
        config = config or MemoryProfileConfig()
        operation = as_operation(operation, name="memory-profile")
        sampler = self._sampler or heap_sampler
        scope = tracing() if self._sampler is None else contextlib.nullcontext()

        samples: list[int] = []
        failed = 0
        with scope:
            initial = sampler()
            peak = initial
            for _ in range(config.iterations):
                _duration, error = await timed_call(operation)
                if error is not None:
                    failed += 1
                current = sampler()
                samples.append(current)
                peak = max(peak, current)
                if config.collect_garbage:
                    self._gc_hint()

        final = samples[-1]
        result = MemoryProfileResult(
            initial_bytes=initial,
            final_bytes=final,
            peak_bytes=peak,
            average_bytes=sum(samples) / len(samples),
            growth_bytes=final - initial,
            possible_leak=detect_leak(samples, config.iterations),
            iterations=config.iterations,
            failed_iterations=failed,
        )
        if result.possible_leak:
            log.warning(
                "%s: possible memory leak (growth %d bytes over %d iterations)",
                operation.name, result.growth_bytes, config.iterations,
            )
        else:
            log.info(
                "%s: memory growth %d bytes over %d iterations",
                operation.name, result.growth_bytes, config.iterations,
            )
        return result
