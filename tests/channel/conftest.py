"""Fake channels for the channel latency tests."""
from __future__ import annotations

import pytest


class RecordingChannel:
    """Channel that never delivers; tracks open/close calls."""

    def __init__(self, name: str, fail_open: bool = False, fail_publish: bool = False) -> None:
        self.name = name
        self.fail_open = fail_open
        self.fail_publish = fail_publish
        self.opened = False
        self.closed = False
        self.callbacks = []

    async def open(self) -> None:
        if self.fail_open:
            raise ConnectionError(f"{self.name}: refused")
        self.opened = True

    async def publish(self, event) -> None:
        if self.fail_publish:
            raise ConnectionError("publish rejected")

    def on_deliver(self, callback) -> None:
        self.callbacks.append(callback)

    async def close(self) -> None:
        self.closed = True


class ChannelRegistry:
    """Factory that remembers every channel it built."""

    def __init__(self, **channel_kwargs) -> None:
        self.channels: list[RecordingChannel] = []
        self._kwargs = channel_kwargs
        self.fail_open_at: int | None = None

    def __call__(self, name: str) -> RecordingChannel:
        idx = len(self.channels)
        ch = RecordingChannel(name, fail_open=(idx == self.fail_open_at), **self._kwargs)
        self.channels.append(ch)
        return ch


@pytest.fixture()
def registry() -> ChannelRegistry:
    return ChannelRegistry()
