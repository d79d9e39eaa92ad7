"""Suite harness: every tester against the simulated collaborators.

Runs, in order:
  1. BenchmarkRunner over each synthetic endpoint
  2. LoadTestEngine on mixed (Zipf-weighted) traffic
  3. ChannelLatencyTester on an InMemoryBroker
  4. StorageTester: upload, then download, then list
  5. MemoryTrendProfiler on a steady (non-leaking) operation

and renders one combined report. If profile=True the whole run is
wrapped in cProfile and the top functions by cumulative time are
attached to the result.
"""
from __future__ import annotations

import asyncio
import cProfile
import io
import pstats
import time
from dataclasses import dataclass, replace

from loadscope.domain.config import STORAGE_OPERATIONS, SuiteConfig
from loadscope.domain.results import (
    BenchmarkResult,
    ChannelTestResult,
    LoadTestResult,
    MemoryProfileResult,
    StorageTestResult,
)
from loadscope.profiling.benchmark import BenchmarkRunner
from loadscope.profiling.channel import ChannelLatencyTester
from loadscope.profiling.load_test import LoadTestEngine
from loadscope.profiling.memory import MemoryTrendProfiler
from loadscope.profiling.report import generate_report
from loadscope.profiling.storage import StorageTester
from loadscope.simulated.blob_store import InMemoryBlobStore
from loadscope.simulated.broker import InMemoryBroker
from loadscope.simulated.workload import SyntheticWorkload


@dataclass(slots=True)
class SuiteResult:
    """Everything one suite run produced."""
    benchmark_results: list[BenchmarkResult]
    load_test_result: LoadTestResult
    channel_result: ChannelTestResult
    storage_results: list[StorageTestResult]
    memory_result: MemoryProfileResult
    total_time_ms: float
    report: str
    cprofile_stats: str | None = None


async def run_suite_async(config: SuiteConfig, seed: int = 42) -> SuiteResult:
    workload = SyntheticWorkload(config.workload, seed=seed)
    t_start = time.perf_counter()

    benchmarks = await BenchmarkRunner(config.benchmark).run(workload.operations())
    load = await LoadTestEngine().run(config.load_test.bind(workload.mixed_operation()))

    broker = InMemoryBroker(delivery_delay_ms=config.workload.delivery_delay_ms)
    channel = await ChannelLatencyTester(broker.channel).run(config.channel)

    store = InMemoryBlobStore(latency_ms=config.workload.mean_latency_ms)
    tester = StorageTester(store)
    storage = []
    for op in STORAGE_OPERATIONS:
        storage.append(await tester.run(replace(config.storage, operation=op)))

    memory = await MemoryTrendProfiler().run(workload.steady_operation(), config.memory)

    total_ms = (time.perf_counter() - t_start) * 1000
    report = generate_report(
        benchmark_results=benchmarks,
        channel_result=channel,
        storage_results=storage,
        load_test_result=load,
        memory_result=memory,
    )
    return SuiteResult(
        benchmark_results=benchmarks,
        load_test_result=load,
        channel_result=channel,
        storage_results=storage,
        memory_result=memory,
        total_time_ms=total_ms,
        report=report,
    )


def run_suite(
    config: SuiteConfig | None = None,
    seed: int = 42,
    profile: bool = False,
) -> SuiteResult:
    """Run the whole suite on a fresh event loop.

    If profile=True, wraps the run in cProfile and includes the top 30
    functions by cumulative time in the result.
    """
    config = config or SuiteConfig()
    if not profile:
        return asyncio.run(run_suite_async(config, seed))

    pr = cProfile.Profile()
    pr.enable()
    result = asyncio.run(run_suite_async(config, seed))
    pr.disable()
    s = io.StringIO()
    ps = pstats.Stats(pr, stream=s).sort_stats("cumulative")
    ps.print_stats(30)
    result.cprofile_stats = s.getvalue()
    return result
