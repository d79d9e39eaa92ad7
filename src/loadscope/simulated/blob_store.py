"""Dict-backed blob store with optional per-call latency."""
from __future__ import annotations

import asyncio


class InMemoryBlobStore:
    def __init__(self, latency_ms: float = 0.0) -> None:
        self._blobs: dict[str, bytes] = {}
        self._latency_s = latency_ms / 1000

    async def _wait(self) -> None:
        if self._latency_s:
            await asyncio.sleep(self._latency_s)

    async def upload(self, key: str, data: bytes) -> None:
        await self._wait()
        self._blobs[key] = bytes(data)

    async def download(self, key: str) -> bytes:
        await self._wait()
        try:
            return self._blobs[key]
        except KeyError:
            raise FileNotFoundError(key) from None

    async def list(self, prefix: str) -> list[str]:
        await self._wait()
        return sorted(k for k in self._blobs if k.startswith(prefix))

    def __len__(self) -> int:
        return len(self._blobs)
