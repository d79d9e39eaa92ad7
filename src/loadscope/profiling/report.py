"""Report generation for profiling results.

Renders any combination of tester results as one line-oriented text
document: a section heading per result type, one metric per line.
Durations and rates use two decimals, error/success rates are
percentages. Sections whose result is absent are left out.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from loadscope.domain.results import (
    BenchmarkResult,
    ChannelTestResult,
    LoadTestResult,
    MemoryProfileResult,
    StorageTestResult,
)

_MB = 1024 * 1024


def _benchmark_section(results: Sequence[BenchmarkResult]) -> list[str]:
    lines = ["## Benchmark Results", ""]
    for r in results:
        s = r.summary
        lines += [
            f"### {r.operation_name}",
            f"- Records: {r.record_count}",
            f"- Concurrency: {r.concurrency}",
            f"- Executed calls: {r.executed_calls}",
            f"- Total duration: {r.total_duration_ms:.2f} ms",
            f"- Throughput: {s.ops_per_second:.2f} ops/sec",
            f"- Error rate: {s.error_rate_pct:.2f}%",
            f"- p50: {s.p50:.2f} ms",
            f"- p95: {s.p95:.2f} ms",
            f"- p99: {s.p99:.2f} ms",
            f"- Memory: {s.memory_bytes / _MB:.2f} MB",
            "",
        ]
    return lines


def _channel_section(r: ChannelTestResult) -> list[str]:
    return [
        "## Channel Latency",
        "",
        f"- Subscriptions: {r.subscriptions}",
        f"- Messages published: {r.messages_published}",
        f"- Messages delivered: {r.messages_delivered}",
        f"- Messages/sec: {r.messages_per_second:.2f}",
        f"- Latency: {r.latency_ms:.2f} ms",
        f"- Connection time: {r.connection_time_ms:.2f} ms",
        "",
    ]


def _storage_section(results: Sequence[StorageTestResult]) -> list[str]:
    lines = ["## Storage Performance", ""]
    for r in results:
        lines += [
            f"### {r.operation}",
            f"- Files: {r.file_count} x {r.file_size_kb} KB",
            f"- Duration: {r.duration_ms:.2f} ms",
            f"- Throughput: {r.throughput_bytes_per_sec / 1024:.2f} KB/s",
            f"- Failed operations: {r.failed_operations}",
            "",
        ]
    return lines


def _load_test_section(r: LoadTestResult) -> list[str]:
    return [
        "## Load Test Results",
        "",
        f"- Total operations: {r.total_operations}",
        f"- Successful operations: {r.successful_operations}",
        f"- Failed operations: {r.failed_operations}",
        f"- Success rate: {r.success_rate_pct:.2f}%",
        f"- Error rate: {r.error_rate_pct:.2f}%",
        f"- Average response time: {r.average_response_time_ms:.2f} ms",
        f"- Throughput: {r.throughput_ops_per_sec:.2f} ops/sec",
        "",
    ]


def _memory_section(r: MemoryProfileResult) -> list[str]:
    return [
        "## Memory Analysis",
        "",
        f"- Iterations: {r.iterations}",
        f"- Initial usage: {r.initial_bytes / _MB:.2f} MB",
        f"- Final usage: {r.final_bytes / _MB:.2f} MB",
        f"- Average usage: {r.average_bytes / _MB:.2f} MB",
        f"- Peak usage: {r.peak_bytes / _MB:.2f} MB",
        f"- Memory growth: {r.growth_bytes / _MB:.2f} MB",
        f"- Possible leak: {'YES' if r.possible_leak else 'NO'}",
        "",
    ]


def generate_report(
    *,
    benchmark_results: Sequence[BenchmarkResult] | None = None,
    channel_result: ChannelTestResult | None = None,
    storage_results: Sequence[StorageTestResult] | None = None,
    load_test_result: LoadTestResult | None = None,
    memory_result: MemoryProfileResult | None = None,
    title: str = "Performance Test Report",
    generated_at: datetime | None = None,
) -> str:
    """Render whichever results are present. Never fails on partial input."""
    generated_at = generated_at or datetime.now(timezone.utc)
    lines = [f"# {title}", "", f"Generated: {generated_at.isoformat()}", ""]

    if benchmark_results:
        lines += _benchmark_section(benchmark_results)
    if channel_result is not None:
        lines += _channel_section(channel_result)
    if storage_results:
        lines += _storage_section(storage_results)
    if load_test_result is not None:
        lines += _load_test_section(load_test_result)
    if memory_result is not None:
        lines += _memory_section(memory_result)

    return "\n".join(lines).rstrip("\n") + "\n"


def format_comparison(before: LoadTestResult, after: LoadTestResult) -> str:
    """Format a before/after table for two load test runs."""

    def _ratio(old: float, new: float) -> str:
        if new <= 0:
            return "-" if old <= 0 else "inf"
        return f"{old / new:.2f}x"

    lines = [
        f"{'Metric':<30} {'Before':>12} {'After':>12} {'Ratio':>10}",
        "-" * 66,
        f"{'Total operations':<30} {before.total_operations:>12,} "
        f"{after.total_operations:>12,} "
        f"{_ratio(after.total_operations, before.total_operations):>10}",
        f"{'Avg response (ms)':<30} {before.average_response_time_ms:>12.2f} "
        f"{after.average_response_time_ms:>12.2f} "
        f"{_ratio(before.average_response_time_ms, after.average_response_time_ms):>10}",
        f"{'Throughput (ops/sec)':<30} {before.throughput_ops_per_sec:>12.2f} "
        f"{after.throughput_ops_per_sec:>12.2f} "
        f"{_ratio(after.throughput_ops_per_sec, before.throughput_ops_per_sec):>10}",
        f"{'Error rate (%)':<30} {before.error_rate_pct:>12.2f} "
        f"{after.error_rate_pct:>12.2f} "
        f"{_ratio(before.error_rate_pct, after.error_rate_pct):>10}",
    ]
    return "\n".join(lines)
