"""loadscope CLI entry point.

Every command runs against the in-memory simulated collaborators and
prints a report.

Usage: loadscope [-v] [command] [options]
"""
import argparse
import asyncio
import logging
import sys

from loadscope.domain.errors import ConfigurationError


def _add_workload_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--seed", type=int, default=42,
        help="RNG seed for reproducible runs (default: 42)",
    )
    p.add_argument(
        "--latency-ms", type=float, default=2.0,
        help="Mean simulated call latency in ms (default: 2.0)",
    )
    p.add_argument(
        "--fail-rate", type=float, default=0.0,
        help="Probability that a simulated call fails (default: 0.0)",
    )


def _add_benchmark_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("benchmark", help="Benchmark each simulated endpoint.")
    p.add_argument("--iterations", type=int, default=100,
                   help="Calls per operation (default: 100)")
    p.add_argument("--concurrency", type=int, default=4,
                   help="Concurrent workers per operation (default: 4)")
    p.add_argument("--timeout", type=float, default=None,
                   help="Per-call timeout in seconds (default: none)")
    _add_workload_args(p)


def _add_load_test_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("load-test", help="Run virtual users against mixed traffic.")
    p.add_argument("--users", type=int, default=10,
                   help="Concurrent virtual users (default: 10)")
    p.add_argument("--ops-per-user", type=int, default=10,
                   help="Sequential calls per user (default: 10)")
    p.add_argument("--ramp-up-ms", type=int, default=0,
                   help="Linear ramp-up window in ms (default: 0)")
    p.add_argument("--timeout", type=float, default=None,
                   help="Per-call timeout in seconds (default: none)")
    _add_workload_args(p)


def _add_compare_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("compare", help="Compare two load levels side by side.")
    p.add_argument("--baseline-users", type=int, default=5,
                   help="Virtual users for the baseline run (default: 5)")
    p.add_argument("--users", type=int, default=50,
                   help="Virtual users for the second run (default: 50)")
    p.add_argument("--ops-per-user", type=int, default=10,
                   help="Sequential calls per user (default: 10)")
    _add_workload_args(p)


def _add_channel_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("channel", help="Measure pub/sub delivery latency.")
    p.add_argument("--subscriptions", type=int, default=10,
                   help="Channels to open (default: 10)")
    p.add_argument("--rate", type=float, default=20.0,
                   help="Messages per second (default: 20)")
    p.add_argument("--duration-ms", type=int, default=1000,
                   help="Publishing window in ms (default: 1000)")
    p.add_argument("--delivery-delay-ms", type=float, default=1.0,
                   help="Simulated delivery delay in ms (default: 1.0)")


def _add_storage_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("storage", help="Measure blob store throughput.")
    p.add_argument("--operation", choices=["upload", "download", "list", "all"],
                   default="all", help="Operation to time (default: all)")
    p.add_argument("--files", type=int, default=20,
                   help="Number of files (default: 20)")
    p.add_argument("--size-kb", type=int, default=64,
                   help="File size in KB (default: 64)")
    p.add_argument("--latency-ms", type=float, default=0.0,
                   help="Simulated per-call latency in ms (default: 0)")


def _add_memory_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("memory", help="Profile memory growth across iterations.")
    p.add_argument("--iterations", type=int, default=100,
                   help="Iterations (default: 100)")
    p.add_argument("--sampler", choices=["heap", "rss"], default="heap",
                   help="heap = tracemalloc, rss = psutil (default: heap)")
    p.add_argument("--leaky", action="store_true",
                   help="Profile an operation that retains memory on every call.")


def _add_suite_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser("suite", help="Run every tester and print one report.")
    p.add_argument("--config", default=None,
                   help="JSON suite config file (default: built-in defaults)")
    p.add_argument("--seed", type=int, default=42,
                   help="RNG seed for reproducible runs (default: 42)")
    p.add_argument("--cprofile", action="store_true",
                   help="Enable cProfile and print top functions by cumulative time.")


def _workload(args: argparse.Namespace):
    from loadscope.domain.config import WorkloadConfig
    from loadscope.simulated.workload import SyntheticWorkload

    return SyntheticWorkload(
        WorkloadConfig(mean_latency_ms=args.latency_ms, fail_rate=args.fail_rate),
        seed=args.seed,
    )


def _run_benchmark(args: argparse.Namespace) -> None:
    from loadscope.domain.config import BenchmarkConfig
    from loadscope.profiling.benchmark import BenchmarkRunner
    from loadscope.profiling.report import generate_report

    runner = BenchmarkRunner(BenchmarkConfig(
        iterations=args.iterations,
        concurrency=args.concurrency,
        timeout_s=args.timeout,
    ))
    results = asyncio.run(runner.run(_workload(args).operations()))
    print(generate_report(benchmark_results=results))


def _run_load_test(args: argparse.Namespace) -> None:
    from loadscope.domain.config import LoadTestConfig
    from loadscope.profiling.load_test import LoadTestEngine
    from loadscope.profiling.report import generate_report

    config = LoadTestConfig(
        operation=_workload(args).mixed_operation(),
        concurrent_users=args.users,
        operations_per_user=args.ops_per_user,
        ramp_up_ms=args.ramp_up_ms,
        timeout_s=args.timeout,
    )
    result = asyncio.run(LoadTestEngine().run(config))
    print(generate_report(load_test_result=result))


def _run_compare(args: argparse.Namespace) -> None:
    from loadscope.domain.config import LoadTestConfig
    from loadscope.profiling.load_test import LoadTestEngine
    from loadscope.profiling.report import format_comparison

    workload = _workload(args)
    engine = LoadTestEngine()

    def _config(users: int) -> LoadTestConfig:
        return LoadTestConfig(
            operation=workload.mixed_operation(),
            concurrent_users=users,
            operations_per_user=args.ops_per_user,
        )

    before = asyncio.run(engine.run(_config(args.baseline_users)))
    after = asyncio.run(engine.run(_config(args.users)))
    print(f"Before: {args.baseline_users} users, after: {args.users} users")
    print()
    print(format_comparison(before, after))


def _run_channel(args: argparse.Namespace) -> None:
    from loadscope.domain.config import ChannelTestConfig
    from loadscope.profiling.channel import ChannelLatencyTester
    from loadscope.profiling.report import generate_report
    from loadscope.simulated.broker import InMemoryBroker

    broker = InMemoryBroker(delivery_delay_ms=args.delivery_delay_ms)
    config = ChannelTestConfig(
        subscription_count=args.subscriptions,
        message_rate=args.rate,
        test_duration_ms=args.duration_ms,
    )
    result = asyncio.run(ChannelLatencyTester(broker.channel).run(config))
    print(generate_report(channel_result=result))


def _run_storage(args: argparse.Namespace) -> None:
    from loadscope.domain.config import STORAGE_OPERATIONS, StorageTestConfig
    from loadscope.profiling.report import generate_report
    from loadscope.profiling.storage import StorageTester
    from loadscope.simulated.blob_store import InMemoryBlobStore

    ops = STORAGE_OPERATIONS if args.operation == "all" else (args.operation,)
    tester = StorageTester(InMemoryBlobStore(latency_ms=args.latency_ms))

    async def _all():
        results = []
        for op in ops:
            config = StorageTestConfig(
                operation=op, file_count=args.files, file_size_kb=args.size_kb,
            )
            results.append(await tester.run(config))
        return results

    print(generate_report(storage_results=asyncio.run(_all())))


def _run_memory(args: argparse.Namespace) -> None:
    from loadscope.domain.config import MemoryProfileConfig
    from loadscope.profiling.memory import MemoryTrendProfiler
    from loadscope.profiling.memory_samplers import rss_sampler
    from loadscope.profiling.report import generate_report
    from loadscope.simulated.workload import SyntheticWorkload

    workload = SyntheticWorkload()
    operation = workload.leaky_operation() if args.leaky else workload.steady_operation()
    # None selects the tracemalloc heap reading with tracing scoped to the run.
    sampler = rss_sampler if args.sampler == "rss" else None
    profiler = MemoryTrendProfiler(sampler=sampler)
    result = asyncio.run(
        profiler.run(operation, MemoryProfileConfig(iterations=args.iterations))
    )
    workload.release()
    print(generate_report(memory_result=result))


def _run_suite(args: argparse.Namespace) -> None:
    from loadscope.domain.config import SuiteConfig, load_suite_config
    from loadscope.profiling.harness import run_suite

    config = load_suite_config(args.config) if args.config else SuiteConfig()
    result = run_suite(config, seed=args.seed, profile=args.cprofile)
    print(result.report)
    if result.cprofile_stats:
        print("--- cProfile top functions ---")
        print(result.cprofile_stats)


_COMMANDS = {
    "benchmark": _run_benchmark,
    "load-test": _run_load_test,
    "compare": _run_compare,
    "channel": _run_channel,
    "storage": _run_storage,
    "memory": _run_memory,
    "suite": _run_suite,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loadscope",
        description="Latency, load, channel and memory-trend profiling.",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Log progress (-v for INFO, -vv for DEBUG).",
    )
    subparsers = parser.add_subparsers(dest="command")

    _add_benchmark_parser(subparsers)
    _add_load_test_parser(subparsers)
    _add_compare_parser(subparsers)
    _add_channel_parser(subparsers)
    _add_storage_parser(subparsers)
    _add_memory_parser(subparsers)
    _add_suite_parser(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        _COMMANDS[args.command](args)
    except ConfigurationError as exc:
        print(f"loadscope: configuration error: {exc}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
