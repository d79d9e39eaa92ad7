"""Profiling and load-testing engine.

  - MeasurementSession: samples in, nearest-rank percentiles out
  - BenchmarkRunner: per-operation latency under fixed concurrency
  - LoadTestEngine: virtual users with linear ramp-up
  - ChannelLatencyTester: pub/sub delivery latency
  - StorageTester: blob store upload/download/list throughput
  - MemoryTrendProfiler: memory samples plus a leak heuristic
  - generate_report / format_comparison: text rendering
"""
from loadscope.profiling.benchmark import BenchmarkRunner
from loadscope.profiling.channel import Channel, ChannelLatencyTester
from loadscope.profiling.harness import SuiteResult, run_suite, run_suite_async
from loadscope.profiling.load_test import CallRecord, LoadTestEngine
from loadscope.profiling.memory import MemoryTrendProfiler, detect_leak
from loadscope.profiling.memory_samplers import heap_sampler, rss_sampler
from loadscope.profiling.report import format_comparison, generate_report
from loadscope.profiling.session import MeasurementSession, Stopwatch, percentile
from loadscope.profiling.storage import BlobStore, StorageTester

__all__ = [
    "BenchmarkRunner",
    "BlobStore",
    "CallRecord",
    "Channel",
    "ChannelLatencyTester",
    "LoadTestEngine",
    "MeasurementSession",
    "MemoryTrendProfiler",
    "StorageTester",
    "Stopwatch",
    "SuiteResult",
    "detect_leak",
    "format_comparison",
    "generate_report",
    "heap_sampler",
    "percentile",
    "rss_sampler",
    "run_suite",
    "run_suite_async",
]
