"""Concurrency support for the runners.

  - ResultLog: deque-based append-only collection, read only after seal()
"""
from loadscope.concurrency.result_log import ResultLog

__all__ = ["ResultLog"]
