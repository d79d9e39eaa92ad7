"""loadscope: latency, load, channel and memory-trend profiling.

Import the pieces you need from the subpackages:
    from loadscope.profiling import BenchmarkRunner, LoadTestEngine
    from loadscope.domain import NamedOperation, LoadTestConfig
"""

__version__ = "0.1.0"
