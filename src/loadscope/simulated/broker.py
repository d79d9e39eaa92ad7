"""In-memory broadcast pub/sub.

Every event published on an open channel is delivered to the callbacks
of every open channel on the same broker, delivery_delay_ms later, via
the running loop's call_later. Closed channels stop receiving; events
already scheduled for them are dropped on arrival.
"""
from __future__ import annotations

import asyncio
import logging

from loadscope.domain.types import DeliveryCallback, Event

log = logging.getLogger(__name__)


class InMemoryBroker:
    """Fan-out hub shared by the channels it creates."""

    def __init__(self, delivery_delay_ms: float = 1.0, open_delay_ms: float = 0.0) -> None:
        self.delivery_delay_ms = delivery_delay_ms
        self.open_delay_ms = open_delay_ms
        self._open: list[InMemoryChannel] = []
        self.published = 0

    def channel(self, name: str) -> InMemoryChannel:
        return InMemoryChannel(self, name)

    @property
    def open_channels(self) -> int:
        return len(self._open)

    def _attach(self, channel: InMemoryChannel) -> None:
        self._open.append(channel)

    def _detach(self, channel: InMemoryChannel) -> None:
        if channel in self._open:
            self._open.remove(channel)

    def _broadcast(self, event: Event) -> None:
        loop = asyncio.get_running_loop()
        delay = self.delivery_delay_ms / 1000
        self.published += 1
        for ch in list(self._open):
            loop.call_later(delay, ch._deliver, event)


class InMemoryChannel:
    """Channel implementation backed by an InMemoryBroker."""

    __slots__ = ("_broker", "name", "_callbacks", "_is_open")

    def __init__(self, broker: InMemoryBroker, name: str) -> None:
        self._broker = broker
        self.name = name
        self._callbacks: list[DeliveryCallback] = []
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    async def open(self) -> None:
        if self._is_open:
            return
        if self._broker.open_delay_ms:
            await asyncio.sleep(self._broker.open_delay_ms / 1000)
        self._is_open = True
        self._broker._attach(self)

    async def publish(self, event: Event) -> None:
        if not self._is_open:
            raise RuntimeError(f"channel {self.name} is not open")
        self._broker._broadcast(event)

    def on_deliver(self, callback: DeliveryCallback) -> None:
        self._callbacks.append(callback)

    async def close(self) -> None:
        self._is_open = False
        self._broker._detach(self)

    def _deliver(self, event: Event) -> None:
        if not self._is_open:
            return
        for cb in self._callbacks:
            try:
                cb(event)
            except Exception:
                log.exception("Delivery callback failed on %s", self.name)

    def __repr__(self) -> str:
        return f"InMemoryChannel({self.name!r}, open={self._is_open})"
