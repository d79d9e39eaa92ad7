"""Tests for LoadTestEngine and its aggregation."""
from __future__ import annotations

import asyncio
import random
import time

import pytest

from loadscope.domain.config import LoadTestConfig
from loadscope.domain.errors import ConfigurationError, OperationError
from loadscope.domain.operation import NamedOperation
from loadscope.profiling.load_test import CallRecord, LoadTestEngine, aggregate

from tests.conftest import CountingOperation


def _err() -> OperationError:
    return OperationError("op", RuntimeError("x"))


class TestAggregate:
    def test_formulas(self) -> None:
        records = [
            CallRecord(0, 10.0),
            CallRecord(0, 20.0),
            CallRecord(1, 30.0, _err()),
            CallRecord(1, 40.0),
        ]
        r = aggregate(records)
        assert r.total_operations == 4
        assert r.failed_operations == 1
        assert r.successful_operations == 3
        assert r.average_response_time_ms == pytest.approx(25.0)
        # 3 successes over 100 ms of summed call time
        assert r.throughput_ops_per_sec == pytest.approx(30.0)
        assert r.error_rate_pct == pytest.approx(25.0)
        assert r.success_rate_pct == pytest.approx(75.0)

    def test_order_independent(self) -> None:
        rng = random.Random(3)
        records = [
            CallRecord(i % 5, rng.uniform(1, 50), _err() if i % 7 == 0 else None)
            for i in range(200)
        ]
        expected = aggregate(records)
        shuffled = list(records)
        rng.shuffle(shuffled)
        got = aggregate(shuffled)
        assert got.total_operations == expected.total_operations
        assert got.failed_operations == expected.failed_operations
        assert got.average_response_time_ms == pytest.approx(expected.average_response_time_ms)
        assert got.throughput_ops_per_sec == pytest.approx(expected.throughput_ops_per_sec)

    def test_zero_time_gives_zero_throughput(self) -> None:
        r = aggregate([CallRecord(0, 0.0)])
        assert r.throughput_ops_per_sec == 0.0


class TestLoadTestEngine:
    @pytest.mark.asyncio
    async def test_five_users_ten_ops(self) -> None:
        op = CountingOperation("ok")
        config = LoadTestConfig(op, concurrent_users=5, operations_per_user=10, ramp_up_ms=0)
        result = await LoadTestEngine().run(config)
        assert result.total_operations == 50
        assert result.successful_operations == 50
        assert result.failed_operations == 0
        assert result.error_rate_pct == 0.0
        assert op.calls == 50

    @pytest.mark.asyncio
    async def test_all_failures_still_return_result(self) -> None:
        op = CountingOperation("bad", fail_when=lambda n: True)
        config = LoadTestConfig(op, concurrent_users=3, operations_per_user=4)
        result = await LoadTestEngine().run(config)
        assert result.total_operations == 12
        assert result.failed_operations == 12
        assert result.error_rate_pct == 100.0
        assert result.throughput_ops_per_sec == 0.0

    @pytest.mark.asyncio
    async def test_no_records_lost_under_interleaving(self) -> None:
        op = CountingOperation("yield", delay_s=0.0005)
        config = LoadTestConfig(op, concurrent_users=20, operations_per_user=25)
        records = await LoadTestEngine().collect(config)
        assert len(records) == 500
        per_user = {u: sum(1 for r in records if r.user == u) for u in range(20)}
        assert set(per_user.values()) == {25}

    @pytest.mark.asyncio
    async def test_ramp_up_staggers_user_start(self) -> None:
        """4 users over 200 ms: the last starts >= ~150 ms after the first."""
        starts: list[float] = []
        op = NamedOperation("stamp", lambda: starts.append(time.perf_counter()))
        config = LoadTestConfig(op, concurrent_users=4, operations_per_user=1, ramp_up_ms=200)
        await LoadTestEngine().run(config)
        assert len(starts) == 4
        assert max(starts) - min(starts) >= 0.14

    @pytest.mark.asyncio
    async def test_user_operations_are_sequential(self) -> None:
        active = 0
        peak = 0

        async def tracked():
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.001)
            active -= 1

        config = LoadTestConfig(NamedOperation("t", tracked), concurrent_users=1, operations_per_user=5)
        await LoadTestEngine().run(config)
        assert peak == 1

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self) -> None:
        async def hang():
            await asyncio.sleep(10)

        config = LoadTestConfig(
            NamedOperation("hang", hang),
            concurrent_users=2, operations_per_user=1, timeout_s=0.02,
        )
        result = await LoadTestEngine().run(config)
        assert result.failed_operations == 2

    def test_per_user_delay(self) -> None:
        config = LoadTestConfig(lambda: None, concurrent_users=4, ramp_up_ms=1000)
        assert config.per_user_delay_ms == 250.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"concurrent_users": 0},
            {"operations_per_user": 0},
            {"ramp_up_ms": -1},
            {"timeout_s": -1.0},
        ],
    )
    def test_invalid_config_fails_fast(self, kwargs) -> None:
        with pytest.raises(ConfigurationError):
            LoadTestConfig(lambda: None, **kwargs)
