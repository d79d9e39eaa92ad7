"""Tests for timed_call and the operation wrapper."""
from __future__ import annotations

import asyncio

import pytest

from loadscope.domain.errors import OperationError
from loadscope.domain.operation import NamedOperation, Operation, as_operation
from loadscope.profiling.timing import timed_call


@pytest.mark.asyncio
async def test_success_returns_no_error():
    op = NamedOperation("ok", lambda: 1)
    duration, error = await timed_call(op)
    assert error is None
    assert duration >= 0


@pytest.mark.asyncio
async def test_failure_is_returned_not_raised():
    def boom():
        raise ValueError("nope")

    duration, error = await timed_call(NamedOperation("boom", boom))
    assert isinstance(error, OperationError)
    assert isinstance(error.cause, ValueError)
    assert error.operation == "boom"
    assert not error.timed_out
    assert duration >= 0


@pytest.mark.asyncio
async def test_timeout_recorded_as_timeout_error():
    async def slow():
        await asyncio.sleep(5)

    duration, error = await timed_call(NamedOperation("slow", slow), timeout_s=0.01)
    assert error is not None
    assert error.timed_out
    assert isinstance(error.cause, TimeoutError)
    assert duration < 2000


@pytest.mark.asyncio
async def test_cancellation_propagates():
    async def slow():
        await asyncio.sleep(5)

    task = asyncio.ensure_future(timed_call(NamedOperation("slow", slow)))
    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_async_callable_is_awaited():
    seen = []

    async def fetch():
        await asyncio.sleep(0)
        seen.append(True)
        return "done"

    assert await NamedOperation("fetch", fetch).invoke() == "done"
    assert seen == [True]


def test_as_operation_wraps_callables():
    op = as_operation(lambda: None, name="wrapped")
    assert isinstance(op, Operation)
    assert op.name == "wrapped"


def test_as_operation_passes_operations_through():
    op = NamedOperation("x", lambda: None)
    assert as_operation(op) is op


def test_named_operation_requires_callable():
    with pytest.raises(TypeError):
        NamedOperation("bad", 42)
