"""Benchmark runner: per-operation latency under fixed concurrency.

For each operation, independently:
  1. open a fresh MeasurementSession
  2. launch `concurrency` workers, each running ceil(iterations /
     concurrency) sequential timed calls
  3. join all workers, then summarize the session

Because every worker runs the same rounded-up share, the number of
calls actually executed is concurrency * ceil(iterations / concurrency).
With iterations=10, concurrency=4 that is 12 calls, not 10. The record
still reports record_count=iterations; executed_calls carries the real
number.

A failing call is recorded as an error sample with its own duration.
It never stops its worker or its siblings.
"""
from __future__ import annotations

import asyncio
import logging
import math
from typing import Iterable

from loadscope.domain.config import BenchmarkConfig
from loadscope.domain.errors import ConfigurationError
from loadscope.domain.operation import Operation, as_operation
from loadscope.domain.results import BenchmarkResult
from loadscope.domain.types import MemorySampler
from loadscope.profiling.session import MeasurementSession
from loadscope.profiling.timing import timed_call

log = logging.getLogger(__name__)


def calls_per_worker(iterations: int, concurrency: int) -> int:
    return math.ceil(iterations / concurrency)


class BenchmarkRunner:
    """Run named operations under a prescribed iteration count and concurrency.

    Args:
        config: iterations, concurrency and optional per-call timeout.
        memory_sampler: forwarded to each MeasurementSession.
    """

    __slots__ = ("_config", "_memory_sampler")

    def __init__(
        self,
        config: BenchmarkConfig | None = None,
        memory_sampler: MemorySampler | None = None,
    ) -> None:
        self._config = config or BenchmarkConfig()
        self._memory_sampler = memory_sampler

    @property
    def config(self) -> BenchmarkConfig:
        return self._config

    async def run(self, operations: Iterable[Operation]) -> list[BenchmarkResult]:
        """Benchmark each operation in turn and return one record per operation."""
        ops = [as_operation(op, name=f"operation-{i}") for i, op in enumerate(operations)]
        if not ops:
            raise ConfigurationError("At least one operation is required")

        results = []
        for op in ops:
            results.append(await self.run_one(op))
        return results

    async def run_one(self, operation: Operation) -> BenchmarkResult:
        cfg = self._config
        share = calls_per_worker(cfg.iterations, cfg.concurrency)
        session = MeasurementSession(memory_sampler=self._memory_sampler)

        log.info(
            "Benchmarking %s: %d iterations, %d workers x %d calls",
            operation.name, cfg.iterations, cfg.concurrency, share,
        )

        async def worker() -> None:
            for _ in range(share):
                duration_ms, error = await timed_call(operation, cfg.timeout_s)
                session.record(duration_ms, error=error)

        session.start()
        await asyncio.gather(*(worker() for _ in range(cfg.concurrency)))
        summary = session.summary()

        log.info(
            "%s: %d calls in %.2f ms, p50=%.2f p95=%.2f p99=%.2f errors=%.1f%%",
            operation.name, summary.sample_count, summary.total_duration_ms,
            summary.p50, summary.p95, summary.p99, summary.error_rate_pct,
        )
        return BenchmarkResult(
            operation_name=operation.name,
            record_count=cfg.iterations,
            concurrency=cfg.concurrency,
            total_duration_ms=summary.total_duration_ms,
            executed_calls=summary.sample_count,
            summary=summary,
        )
