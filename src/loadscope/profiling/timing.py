"""Timing a single call to an operation.

timed_call never raises for failures of the operation itself: an
exception (or an expired timeout) is measured like a success and
returned as an OperationError. Cancellation of the calling task still
propagates.
"""
from __future__ import annotations

import asyncio
import logging
import time

from loadscope.domain.errors import OperationError
from loadscope.domain.operation import Operation
from loadscope.domain.types import Milliseconds

log = logging.getLogger(__name__)


async def timed_call(
    operation: Operation,
    timeout_s: float | None = None,
) -> tuple[Milliseconds, OperationError | None]:
    """Invoke ``operation`` once. Returns (duration_ms, error or None)."""
    start = time.perf_counter()
    try:
        if timeout_s is None:
            await operation.invoke()
        else:
            await asyncio.wait_for(operation.invoke(), timeout=timeout_s)
    except asyncio.TimeoutError as exc:
        duration_ms = (time.perf_counter() - start) * 1000
        # asyncio.TimeoutError is the builtin since 3.11; normalize for 3.10.
        cause = exc if isinstance(exc, TimeoutError) else TimeoutError(str(exc))
        log.debug("%s timed out after %.2f ms", operation.name, duration_ms)
        return duration_ms, OperationError(operation.name, cause)
    except Exception as exc:
        duration_ms = (time.perf_counter() - start) * 1000
        log.debug("%s failed: %s", operation.name, type(exc).__name__)
        return duration_ms, OperationError(operation.name, exc)
    return (time.perf_counter() - start) * 1000, None
