"""Channel latency tester for publish/subscribe channels.

  1. Open `subscription_count` channels, each with a delivery callback
     that timestamps every event it receives. connection_time_ms covers
     all of the opens.
  2. Publish one synthetic event every 1000 / message_rate ms until
     test_duration_ms has elapsed. This is a paced loop, not a burst.
  3. Every delivery, on any subscription, is timestamped into one shared
     list in arrival order. The k-th arrival is expected at
     test_start + k * interval. Its latency is the absolute deviation
     from that. The reported latency is the mean of those absolute
     deviations, so early and late deliveries both count against it.
  4. messages_per_second = deliveries / (test_duration_ms / 1000).

Every opened channel is closed before run() returns, whatever happened.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import Callable, Protocol, runtime_checkable

from loadscope.domain.config import ChannelTestConfig
from loadscope.domain.results import ChannelTestResult
from loadscope.domain.types import DeliveryCallback, Event, Milliseconds

log = logging.getLogger(__name__)


@runtime_checkable
class Channel(Protocol):
    """The pub/sub boundary. Internals are opaque to the tester."""

    async def open(self) -> None: ...

    async def publish(self, event: Event) -> None: ...

    def on_deliver(self, callback: DeliveryCallback) -> None: ...

    async def close(self) -> None: ...


ChannelFactory = Callable[[str], Channel]


def mean_absolute_latency(
    arrivals: list[float],
    test_start_ms: float,
    interval_ms: float,
) -> Milliseconds:
    """Mean |actual - expected| over all deliveries in arrival order.

    arrivals[k] is the time (ms) of the k-th delivery across every
    subscription. Returns 0.0 when nothing was delivered.
    """
    if not arrivals:
        return 0.0
    total = sum(
        abs(actual - (test_start_ms + k * interval_ms))
        for k, actual in enumerate(arrivals)
    )
    return total / len(arrivals)


class ChannelLatencyTester:
    """Measure connection time and delivery latency over N subscriptions.

    Args:
        channel_factory: builds an unopened channel from a name.
        clock: seconds-based monotonic clock.
    """

    def __init__(
        self,
        channel_factory: ChannelFactory,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._factory = channel_factory
        self._clock = clock

    def _now_ms(self) -> float:
        return self._clock() * 1000

    async def run(self, config: ChannelTestConfig) -> ChannelTestResult:
        interval_ms = config.message_interval_ms
        arrivals: list[float] = []
        published = 0

        log.info("Creating %d subscriptions...", config.subscription_count)
        async with contextlib.AsyncExitStack() as stack:
            connection_start = self._now_ms()
            channels = []
            for i in range(config.subscription_count):
                channel = self._factory(f"test-channel-{i}")
                channel.on_deliver(self._recorder(arrivals))
                await channel.open()
                stack.push_async_callback(self._close, channel)
                channels.append(channel)
            connection_ms = self._now_ms() - connection_start

            publisher = channels[0]
            test_start = self._now_ms()
            while self._now_ms() - test_start < config.test_duration_ms:
                event = {"seq": published, "sent_at_ms": self._now_ms()}
                try:
                    await publisher.publish(event)
                    published += 1
                except Exception as exc:
                    log.debug("publish of event %d failed: %s", published, exc)
                await asyncio.sleep(interval_ms / 1000)

        delivered = len(arrivals)
        result = ChannelTestResult(
            subscriptions=config.subscription_count,
            messages_published=published,
            messages_delivered=delivered,
            messages_per_second=delivered / (config.test_duration_ms / 1000),
            latency_ms=mean_absolute_latency(arrivals, test_start, interval_ms),
            connection_time_ms=connection_ms,
        )
        log.info(
            "Channel test: %d published, %d delivered, latency %.2f ms, connect %.2f ms",
            published, delivered, result.latency_ms, connection_ms,
        )
        return result

    def _recorder(self, arrivals: list[float]) -> DeliveryCallback:
        def on_event(_event: Event) -> None:
            arrivals.append(self._now_ms())
        return on_event

    @staticmethod
    async def _close(channel: Channel) -> None:
        try:
            await channel.close()
        except Exception:
            log.warning("Failed to close channel %r", channel, exc_info=True)
