"""The operation boundary: a named, zero-argument unit of work.

The engine only times operations; it never looks inside them. Anything
with a ``name`` and an ``async invoke()`` qualifies. NamedOperation
adapts a plain callable (sync or async) to that shape.
"""
from __future__ import annotations

import inspect
from typing import Any, Protocol, runtime_checkable

from loadscope.domain.types import OperationFn, OperationName


@runtime_checkable
class Operation(Protocol):
    name: OperationName

    async def invoke(self) -> Any: ...


class NamedOperation:
    """Wrap a callable as an Operation.

    If calling ``fn`` returns an awaitable, it is awaited, so both
    ``lambda: store.get(k)`` and ``async def fetch(): ...`` work.
    """

    __slots__ = ("name", "_fn")

    def __init__(self, name: OperationName, fn: OperationFn) -> None:
        if not callable(fn):
            raise TypeError(f"operation {name!r}: fn must be callable")
        self.name = name
        self._fn = fn

    async def invoke(self) -> Any:
        outcome = self._fn()
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome

    def __repr__(self) -> str:
        return f"NamedOperation({self.name!r})"


def as_operation(target: Operation | OperationFn, name: str = "operation") -> Operation:
    """Accept either an Operation or a bare callable."""
    if isinstance(target, Operation):
        return target
    return NamedOperation(name, target)
