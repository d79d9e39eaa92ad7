"""Synthetic operations with seeded latency and failure behaviour.

Endpoint pattern:
  - a fixed pool of named endpoints, each with its own latency scale
  - latency per call ~ gauss(mean * scale, jitter), floored at 0
  - each call fails with probability fail_rate (SimulatedFailure)
  - mixed traffic picks endpoints with Zipf-like weights
    (endpoint i has weight 1/(i+1))

Everything is driven by one random.Random(seed), so two workloads with
the same seed produce the same latency/failure sequence for the same
call order.
"""
from __future__ import annotations

import asyncio
import random

from loadscope.domain.config import WorkloadConfig
from loadscope.domain.operation import NamedOperation

# (endpoint name, latency scale)
_ENDPOINTS = [
    ("list_workouts", 1.0),
    ("get_exercise", 0.6),
    ("record_progress", 1.4),
    ("update_profile", 1.2),
    ("search_exercises", 2.0),
    ("fetch_analytics", 3.0),
]


class SimulatedFailure(Exception):
    """Raised by a synthetic operation to model a failing call."""


class SyntheticWorkload:
    """Build NamedOperations that behave like a remote service."""

    __slots__ = ("_rng", "_config", "_zipf_weights", "_retained")

    def __init__(self, config: WorkloadConfig | None = None, seed: int = 42) -> None:
        self._rng = random.Random(seed)
        self._config = config or WorkloadConfig()
        self._zipf_weights = [1.0 / (i + 1) for i in range(len(_ENDPOINTS))]
        self._retained: list[bytes] = []

    @property
    def endpoint_names(self) -> list[str]:
        return [name for name, _ in _ENDPOINTS]

    def _latency_s(self, scale: float) -> float:
        cfg = self._config
        ms = self._rng.gauss(cfg.mean_latency_ms * scale, cfg.jitter_ms)
        return max(0.0, ms) / 1000

    async def _call(self, name: str, scale: float) -> str:
        await asyncio.sleep(self._latency_s(scale))
        if self._rng.random() < self._config.fail_rate:
            raise SimulatedFailure(f"{name}: simulated failure")
        return name

    def operation(self, name: str) -> NamedOperation:
        """One endpoint as an operation. Unknown names use scale 1.0."""
        scale = dict(_ENDPOINTS).get(name, 1.0)
        return NamedOperation(name, lambda: self._call(name, scale))

    def operations(self) -> list[NamedOperation]:
        return [self.operation(name) for name, _ in _ENDPOINTS]

    def mixed_operation(self) -> NamedOperation:
        """Each call hits one endpoint chosen by Zipf weight."""
        def pick():
            name, scale = self._rng.choices(_ENDPOINTS, weights=self._zipf_weights, k=1)[0]
            return self._call(name, scale)
        return NamedOperation("mixed", pick)

    def leaky_operation(self, chunk_bytes: int = 64 * 1024) -> NamedOperation:
        """Retains a new chunk on every call, so memory only grows."""
        def leak() -> None:
            self._retained.append(bytes(chunk_bytes))
        return NamedOperation("leaky", leak)

    def steady_operation(self, chunk_bytes: int = 64 * 1024) -> NamedOperation:
        """Allocates and drops a chunk on every call."""
        def churn() -> int:
            return len(bytes(chunk_bytes))
        return NamedOperation("steady", churn)

    def release(self) -> None:
        """Drop everything leaky_operation retained."""
        self._retained.clear()
