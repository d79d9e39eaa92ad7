"""Shared type aliases used across the engine."""
from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeAlias

Milliseconds: TypeAlias = float
Bytes: TypeAlias = int
OperationName: TypeAlias = str
Event: TypeAlias = dict[str, Any]

# Anything an operation wrapper can call: plain or coroutine function.
OperationFn: TypeAlias = Callable[[], Any | Awaitable[Any]]
MemorySampler: TypeAlias = Callable[[], Bytes]
DeliveryCallback: TypeAlias = Callable[[Event], None]
