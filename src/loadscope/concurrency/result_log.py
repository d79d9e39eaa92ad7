"""Append-only results collection shared by concurrent workers.

Why deque? deque.append() is a single C-level operation, so appends
from many coroutines (or threads) never lose or corrupt entries and no
Python-level lock is needed on the hot path.

Workers only append. Reading is allowed once the log is sealed, which
the runners do right after join-all. Reading earlier raises, so a
half-written collection can never be summarized.
"""
from __future__ import annotations

from collections import deque
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class ResultLog(Generic[T]):
    """Append-only buffer with an explicit write phase / read phase split."""

    __slots__ = ("_buffer", "_sealed")

    def __init__(self) -> None:
        self._buffer: deque[T] = deque()
        self._sealed = False

    def append(self, item: T) -> None:
        """Hot path. Rejected once the log is sealed."""
        if self._sealed:
            raise RuntimeError("ResultLog is sealed; no further appends")
        self._buffer.append(item)

    def seal(self) -> None:
        """End the write phase. Idempotent."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def snapshot(self) -> list[T]:
        """Insertion-ordered copy of every entry. Requires seal()."""
        if not self._sealed:
            raise RuntimeError("seal() the ResultLog before reading it")
        return list(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def __iter__(self) -> Iterator[T]:
        return iter(self.snapshot())
