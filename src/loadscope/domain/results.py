"""Result values returned by the testers.

All of these are frozen: produced once at the end of a run and handed
to the caller. None of them refers back to live workers or sessions.
"""
from __future__ import annotations

from dataclasses import dataclass

from loadscope.domain.errors import OperationError
from loadscope.domain.types import Bytes, Milliseconds


@dataclass(frozen=True, slots=True)
class Sample:
    """One timed attempt at an operation.

    duration_ms is stored as given; negative values are not clamped.
    """
    duration_ms: Milliseconds
    is_error: bool = False
    error: OperationError | None = None


@dataclass(frozen=True, slots=True)
class PerformanceSummary:
    """Aggregates computed from one MeasurementSession snapshot."""
    total_duration_ms: Milliseconds
    memory_bytes: Bytes
    ops_per_second: float
    error_rate_pct: float
    p50: Milliseconds
    p95: Milliseconds
    p99: Milliseconds
    sample_count: int


@dataclass(frozen=True, slots=True)
class BenchmarkResult:
    """One record per benchmarked operation.

    record_count is the requested iteration count; executed_calls is
    concurrency * ceil(iterations / concurrency), which can be larger.
    """
    operation_name: str
    record_count: int
    concurrency: int
    total_duration_ms: Milliseconds
    executed_calls: int
    summary: PerformanceSummary


@dataclass(frozen=True, slots=True)
class LoadTestResult:
    total_operations: int
    successful_operations: int
    failed_operations: int
    average_response_time_ms: Milliseconds
    throughput_ops_per_sec: float
    error_rate_pct: float

    @property
    def success_rate_pct(self) -> float:
        if self.total_operations == 0:
            return 0.0
        return self.successful_operations / self.total_operations * 100


@dataclass(frozen=True, slots=True)
class ChannelTestResult:
    subscriptions: int
    messages_published: int
    messages_delivered: int
    messages_per_second: float
    latency_ms: Milliseconds        # mean absolute deviation from expected arrival
    connection_time_ms: Milliseconds


@dataclass(frozen=True, slots=True)
class StorageTestResult:
    operation: str
    file_size_kb: int
    file_count: int
    duration_ms: Milliseconds
    throughput_bytes_per_sec: float
    failed_operations: int = 0


@dataclass(frozen=True, slots=True)
class MemoryProfileResult:
    initial_bytes: Bytes
    final_bytes: Bytes
    peak_bytes: Bytes
    average_bytes: float
    growth_bytes: Bytes
    possible_leak: bool
    iterations: int
    failed_iterations: int = 0
