"""Test configurations.

Every config validates itself in __post_init__, so a bad parameter
raises ConfigurationError at construction time, before any runner
touches it. A test never partially starts.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

from loadscope.domain.errors import ConfigurationError
from loadscope.domain.operation import Operation, as_operation
from loadscope.domain.types import OperationFn

STORAGE_OPERATIONS = ("upload", "download", "list")


def _require_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ConfigurationError(f"{name} must be > 0, got {value}")


def _check_timeout(timeout_s: float | None) -> None:
    if timeout_s is not None and timeout_s <= 0:
        raise ConfigurationError(f"timeout_s must be > 0 or None, got {timeout_s}")


@dataclass(slots=True)
class BenchmarkConfig:
    """Iteration count and worker count applied to every benchmarked operation."""
    iterations: int = 100
    concurrency: int = 4
    timeout_s: float | None = None

    def __post_init__(self) -> None:
        _require_positive("iterations", self.iterations)
        _require_positive("concurrency", self.concurrency)
        _check_timeout(self.timeout_s)


@dataclass(slots=True)
class LoadTestConfig:
    """Virtual-user load test parameters.

    ramp_up_ms is spread linearly: user i starts at i * ramp_up_ms / users.
    """
    operation: Operation | OperationFn
    concurrent_users: int = 10
    operations_per_user: int = 10
    ramp_up_ms: int = 0
    timeout_s: float | None = None

    def __post_init__(self) -> None:
        _require_positive("concurrent_users", self.concurrent_users)
        _require_positive("operations_per_user", self.operations_per_user)
        if self.ramp_up_ms < 0:
            raise ConfigurationError(f"ramp_up_ms must be >= 0, got {self.ramp_up_ms}")
        _check_timeout(self.timeout_s)
        self.operation = as_operation(self.operation, name="load-test")

    @property
    def per_user_delay_ms(self) -> float:
        return self.ramp_up_ms / self.concurrent_users


@dataclass(slots=True)
class ChannelTestConfig:
    subscription_count: int = 10
    message_rate: float = 10.0          # messages per second
    test_duration_ms: int = 1_000

    def __post_init__(self) -> None:
        _require_positive("subscription_count", self.subscription_count)
        _require_positive("message_rate", self.message_rate)
        _require_positive("test_duration_ms", self.test_duration_ms)

    @property
    def message_interval_ms(self) -> float:
        return 1000.0 / self.message_rate


@dataclass(slots=True)
class StorageTestConfig:
    operation: str = "upload"           # one of STORAGE_OPERATIONS
    file_count: int = 10
    file_size_kb: int = 64
    key_prefix: str = "test-file-"

    def __post_init__(self) -> None:
        if self.operation not in STORAGE_OPERATIONS:
            raise ConfigurationError(
                f"Unknown storage operation: {self.operation!r}. "
                f"Use one of {', '.join(STORAGE_OPERATIONS)}."
            )
        _require_positive("file_count", self.file_count)
        _require_positive("file_size_kb", self.file_size_kb)

    def key(self, index: int) -> str:
        return f"{self.key_prefix}{index}.txt"


@dataclass(slots=True)
class MemoryProfileConfig:
    iterations: int = 100
    collect_garbage: bool = True

    def __post_init__(self) -> None:
        _require_positive("iterations", self.iterations)


@dataclass(slots=True)
class WorkloadConfig:
    """Shape of the simulated system under test."""
    mean_latency_ms: float = 2.0
    jitter_ms: float = 1.0
    fail_rate: float = 0.0
    delivery_delay_ms: float = 1.0

    def __post_init__(self) -> None:
        if self.mean_latency_ms < 0 or self.jitter_ms < 0 or self.delivery_delay_ms < 0:
            raise ConfigurationError("latencies must be >= 0")
        if not 0.0 <= self.fail_rate <= 1.0:
            raise ConfigurationError(f"fail_rate must be in [0, 1], got {self.fail_rate}")


@dataclass(slots=True)
class LoadProfile:
    """LoadTestConfig without the operation, for config files."""
    concurrent_users: int = 10
    operations_per_user: int = 10
    ramp_up_ms: int = 0
    timeout_s: float | None = None

    def __post_init__(self) -> None:
        # Reuse the real validation; the operation is irrelevant here.
        LoadTestConfig(
            operation=lambda: None,
            concurrent_users=self.concurrent_users,
            operations_per_user=self.operations_per_user,
            ramp_up_ms=self.ramp_up_ms,
            timeout_s=self.timeout_s,
        )

    def bind(self, operation: Operation | OperationFn) -> LoadTestConfig:
        return LoadTestConfig(
            operation=operation,
            concurrent_users=self.concurrent_users,
            operations_per_user=self.operations_per_user,
            ramp_up_ms=self.ramp_up_ms,
            timeout_s=self.timeout_s,
        )


@dataclass(slots=True)
class SuiteConfig:
    """Settings for a full run of every tester."""
    benchmark: BenchmarkConfig = field(default_factory=BenchmarkConfig)
    load_test: LoadProfile = field(default_factory=LoadProfile)
    channel: ChannelTestConfig = field(default_factory=ChannelTestConfig)
    storage: StorageTestConfig = field(default_factory=StorageTestConfig)
    memory: MemoryProfileConfig = field(default_factory=MemoryProfileConfig)
    workload: WorkloadConfig = field(default_factory=WorkloadConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SuiteConfig:
        """Build from a mapping of section name -> keyword arguments.

        Missing sections use defaults. Unknown sections or keys raise
        ConfigurationError.
        """
        sections = {f.name: f for f in fields(cls)}
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigurationError(f"Unknown config sections: {sorted(unknown)}")

        kwargs: dict[str, Any] = {}
        for name, raw in data.items():
            section_cls = _SECTION_TYPES[name]
            if not isinstance(raw, Mapping):
                raise ConfigurationError(f"Section {name!r} must be a mapping")
            allowed = {f.name for f in fields(section_cls)}
            bad = set(raw) - allowed
            if bad:
                raise ConfigurationError(f"Unknown keys in {name!r}: {sorted(bad)}")
            kwargs[name] = section_cls(**raw)
        return cls(**kwargs)


_SECTION_TYPES: dict[str, type] = {
    "benchmark": BenchmarkConfig,
    "load_test": LoadProfile,
    "channel": ChannelTestConfig,
    "storage": StorageTestConfig,
    "memory": MemoryProfileConfig,
    "workload": WorkloadConfig,
}


def load_suite_config(path: str | Path) -> SuiteConfig:
    """Read a JSON suite config file."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{path}: invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: top level must be an object")
    return SuiteConfig.from_dict(data)
