"""In-memory stand-ins for the systems a test measures.

  - SyntheticWorkload: seeded operations with latency and failures
  - InMemoryBroker / InMemoryChannel: broadcast pub/sub channels
  - InMemoryBlobStore: dict-backed blob store
"""
from loadscope.simulated.blob_store import InMemoryBlobStore
from loadscope.simulated.broker import InMemoryBroker, InMemoryChannel
from loadscope.simulated.workload import SimulatedFailure, SyntheticWorkload

__all__ = [
    "InMemoryBlobStore",
    "InMemoryBroker",
    "InMemoryChannel",
    "SimulatedFailure",
    "SyntheticWorkload",
]
