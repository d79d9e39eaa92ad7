"""Domain model for loadscope.

Re-exports the public value types:
    from loadscope.domain import LoadTestConfig, LoadTestResult, NamedOperation
"""
from loadscope.domain.config import (
    STORAGE_OPERATIONS,
    BenchmarkConfig,
    ChannelTestConfig,
    LoadProfile,
    LoadTestConfig,
    MemoryProfileConfig,
    StorageTestConfig,
    SuiteConfig,
    WorkloadConfig,
    load_suite_config,
)
from loadscope.domain.errors import (
    ConfigurationError,
    InsufficientDataError,
    LoadscopeError,
    OperationError,
)
from loadscope.domain.operation import NamedOperation, Operation, as_operation
from loadscope.domain.results import (
    BenchmarkResult,
    ChannelTestResult,
    LoadTestResult,
    MemoryProfileResult,
    PerformanceSummary,
    Sample,
    StorageTestResult,
)

__all__ = [
    "STORAGE_OPERATIONS",
    "BenchmarkConfig",
    "ChannelTestConfig",
    "LoadProfile",
    "LoadTestConfig",
    "MemoryProfileConfig",
    "StorageTestConfig",
    "SuiteConfig",
    "WorkloadConfig",
    "load_suite_config",
    "ConfigurationError",
    "InsufficientDataError",
    "LoadscopeError",
    "OperationError",
    "NamedOperation",
    "Operation",
    "as_operation",
    "BenchmarkResult",
    "ChannelTestResult",
    "LoadTestResult",
    "MemoryProfileResult",
    "PerformanceSummary",
    "Sample",
    "StorageTestResult",
]
