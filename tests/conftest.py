"""Shared helpers for the loadscope tests."""
from __future__ import annotations

import asyncio

import pytest

from loadscope.domain.operation import NamedOperation


class FakeClock:
    """Manually advanced seconds clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingOperation(NamedOperation):
    """Counts calls; fails on the calls for which fail_when(n) is true."""

    def __init__(self, name: str = "counted", delay_s: float = 0.0, fail_when=None) -> None:
        self.calls = 0
        self._delay_s = delay_s
        self._fail_when = fail_when or (lambda n: False)
        super().__init__(name, self._run)

    async def _run(self) -> None:
        self.calls += 1
        n = self.calls
        if self._delay_s:
            await asyncio.sleep(self._delay_s)
        if self._fail_when(n):
            raise RuntimeError(f"call {n} failed")


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock(start=100.0)


@pytest.fixture()
def counting_op() -> CountingOperation:
    return CountingOperation()
