"""Storage throughput tester for blob stores.

Runs one kind of operation sequentially against a blob store:

    upload    file_count blobs of file_size_kb KiB (filled with b"A")
    download  the same keys back
    list      a single list(prefix) call

Throughput counts bytes of successful uploads/downloads only and is
bytes / elapsed seconds. A list run always reports 0 bytes/sec.
Failed calls are counted, not raised.
"""
from __future__ import annotations

import logging
import time
from typing import Protocol, runtime_checkable

from loadscope.domain.config import StorageTestConfig
from loadscope.domain.results import StorageTestResult

log = logging.getLogger(__name__)


@runtime_checkable
class BlobStore(Protocol):
    async def upload(self, key: str, data: bytes) -> None: ...

    async def download(self, key: str) -> bytes: ...

    async def list(self, prefix: str) -> list[str]: ...


def generate_test_file(size_kb: int) -> bytes:
    return b"A" * (size_kb * 1024)


class StorageTester:
    """Time upload / download / list against a BlobStore."""

    def __init__(self, store: BlobStore) -> None:
        self._store = store

    async def run(self, config: StorageTestConfig) -> StorageTestResult:
        file_bytes = config.file_size_kb * 1024
        total_bytes = 0
        failed = 0

        start = time.perf_counter()
        if config.operation == "list":
            try:
                await self._store.list(config.key_prefix)
            except Exception as exc:
                log.debug("list(%r) failed: %s", config.key_prefix, exc)
                failed += 1
        else:
            payload = generate_test_file(config.file_size_kb)
            for i in range(config.file_count):
                key = config.key(i)
                try:
                    if config.operation == "upload":
                        await self._store.upload(key, payload)
                    else:
                        await self._store.download(key)
                    total_bytes += file_bytes
                except Exception as exc:
                    log.debug("%s(%r) failed: %s", config.operation, key, exc)
                    failed += 1
        duration_ms = (time.perf_counter() - start) * 1000

        throughput = total_bytes / (duration_ms / 1000) if duration_ms > 0 else 0.0
        log.info(
            "Storage %s: %d files x %d KB in %.2f ms (%.2f KB/s, %d failed)",
            config.operation, config.file_count, config.file_size_kb,
            duration_ms, throughput / 1024, failed,
        )
        return StorageTestResult(
            operation=config.operation,
            file_size_kb=config.file_size_kb,
            file_count=config.file_count,
            duration_ms=duration_ms,
            throughput_bytes_per_sec=throughput,
            failed_operations=failed,
        )
