"""Exception taxonomy for the profiling engine.

Only configuration mistakes and empty-data summaries are raised to
callers. Failures of the system under test become OperationError values
attached to error samples; they never propagate out of a test run.
"""
from __future__ import annotations


class LoadscopeError(Exception):
    """Base class for everything the engine raises."""


class ConfigurationError(LoadscopeError, ValueError):
    """Invalid test parameters. Raised before any worker is launched."""


class InsufficientDataError(LoadscopeError):
    """A summary was requested on a session with zero samples."""


class OperationError(LoadscopeError):
    """A target operation failed (raised, or ran past its timeout).

    Recorded on the error Sample, not raised out of the test.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation}: {type(cause).__name__}: {cause}")
        self.operation = operation
        self.cause = cause

    @property
    def timed_out(self) -> bool:
        return isinstance(self.cause, TimeoutError)
