"""Tests for ChannelLatencyTester."""
from __future__ import annotations

import pytest

from loadscope.domain.config import ChannelTestConfig
from loadscope.domain.errors import ConfigurationError
from loadscope.profiling.channel import Channel, ChannelLatencyTester, mean_absolute_latency
from loadscope.simulated.broker import InMemoryBroker

from tests.channel.conftest import ChannelRegistry
from tests.conftest import FakeClock


class FanOutRegistry:
    """Channels whose publish delivers to every subscriber 1 ms later on a fake clock.

    Each publish also advances the clock to the next 10 ms slot.
    """

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.callbacks = []

    def __call__(self, name: str):
        registry = self

        class _Channel:
            async def open(self) -> None:
                pass

            async def publish(self, event) -> None:
                registry.clock.advance(0.001)
                for cb in registry.callbacks:
                    cb(event)
                registry.clock.advance(0.009)

            def on_deliver(self, callback) -> None:
                registry.callbacks.append(callback)

            async def close(self) -> None:
                pass

        return _Channel()


class TestMeanAbsoluteLatency:
    def test_absolute_not_signed(self) -> None:
        """One early (-2) and one late (+2) delivery average to 2, not 0."""
        assert mean_absolute_latency([2.0, 8.0], 0.0, 10.0) == pytest.approx(2.0)

    def test_index_runs_across_subscriptions(self) -> None:
        # two subscriptions both get event 0 at t=1 and event 1 at t=11;
        # arrivals are expected at 0, 10, 20, 30
        arrivals = [1.0, 1.0, 11.0, 11.0]
        assert mean_absolute_latency(arrivals, 0.0, 10.0) == pytest.approx(9.5)

    def test_offset_start(self) -> None:
        assert mean_absolute_latency([105.0], 100.0, 50.0) == pytest.approx(5.0)

    def test_no_deliveries(self) -> None:
        assert mean_absolute_latency([], 0.0, 10.0) == 0.0


class TestChannelLatencyTester:
    @pytest.mark.asyncio
    async def test_broker_round_trip(self) -> None:
        broker = InMemoryBroker(delivery_delay_ms=1.0)
        config = ChannelTestConfig(subscription_count=3, message_rate=50, test_duration_ms=200)
        result = await ChannelLatencyTester(broker.channel).run(config)

        assert result.subscriptions == 3
        assert result.messages_published >= 5
        assert result.messages_delivered == 3 * result.messages_published
        assert result.messages_per_second == pytest.approx(result.messages_delivered / 0.2)
        assert result.latency_ms >= 0.0
        assert result.connection_time_ms >= 0.0
        assert broker.open_channels == 0

    @pytest.mark.asyncio
    async def test_latency_indexes_all_deliveries_together(self) -> None:
        clock = FakeClock()
        tester = ChannelLatencyTester(FanOutRegistry(clock), clock=clock)
        config = ChannelTestConfig(subscription_count=2, message_rate=100, test_duration_ms=15)
        result = await tester.run(config)

        assert result.messages_published == 2
        assert result.messages_delivered == 4
        # arrivals 1, 1, 11, 11 against expected 0, 10, 20, 30
        assert result.latency_ms == pytest.approx(9.5)

    @pytest.mark.asyncio
    async def test_pacing_is_not_a_burst(self) -> None:
        """20 msg/s over 250 ms publishes about 5 events, not hundreds."""
        broker = InMemoryBroker(delivery_delay_ms=0.5)
        config = ChannelTestConfig(subscription_count=1, message_rate=20, test_duration_ms=250)
        result = await ChannelLatencyTester(broker.channel).run(config)
        assert 3 <= result.messages_published <= 7

    @pytest.mark.asyncio
    async def test_slow_open_counts_towards_connection_time(self) -> None:
        broker = InMemoryBroker(delivery_delay_ms=0.5, open_delay_ms=20)
        config = ChannelTestConfig(subscription_count=3, message_rate=100, test_duration_ms=20)
        result = await ChannelLatencyTester(broker.channel).run(config)
        assert result.connection_time_ms >= 55

    @pytest.mark.asyncio
    async def test_channels_closed_after_run(self, registry: ChannelRegistry) -> None:
        config = ChannelTestConfig(subscription_count=4, message_rate=100, test_duration_ms=30)
        result = await ChannelLatencyTester(registry).run(config)
        assert len(registry.channels) == 4
        assert all(ch.opened and ch.closed for ch in registry.channels)
        assert all(isinstance(ch, Channel) for ch in registry.channels)
        assert result.messages_delivered == 0
        assert result.latency_ms == 0.0

    @pytest.mark.asyncio
    async def test_publish_failures_are_data(self) -> None:
        registry = ChannelRegistry(fail_publish=True)
        config = ChannelTestConfig(subscription_count=2, message_rate=100, test_duration_ms=30)
        result = await ChannelLatencyTester(registry).run(config)
        assert result.messages_published == 0
        assert all(ch.closed for ch in registry.channels)

    @pytest.mark.asyncio
    async def test_open_failure_closes_already_opened(self, registry: ChannelRegistry) -> None:
        registry.fail_open_at = 2
        config = ChannelTestConfig(subscription_count=4, message_rate=10, test_duration_ms=100)
        with pytest.raises(ConnectionError):
            await ChannelLatencyTester(registry).run(config)
        assert len(registry.channels) == 3
        assert registry.channels[0].closed
        assert registry.channels[1].closed
        assert not registry.channels[2].opened

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"subscription_count": 0},
            {"message_rate": 0},
            {"test_duration_ms": 0},
        ],
    )
    def test_invalid_config(self, kwargs) -> None:
        with pytest.raises(ConfigurationError):
            ChannelTestConfig(**kwargs)

    def test_message_interval(self) -> None:
        assert ChannelTestConfig(message_rate=4).message_interval_ms == 250.0
