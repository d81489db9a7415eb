# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for InMemoryEventBus.

Covers lifecycle, topic fan-out, subscription snapshots, bounded
delivery on full queues, close/open suppression and teardown.
"""

from __future__ import annotations

import asyncio

import pytest

from omnibase_coupler.enums import EnumCoupledKind, EnumCouplingTopic
from omnibase_coupler.errors import InfraUnavailableError
from omnibase_coupler.event_bus import InMemoryEventBus
from omnibase_coupler.event_bus.models import (
    ModelBrokenEvent,
    ModelCoupledEvent,
    ModelCreatedEvent,
)


class TestInMemoryEventBusLifecycle:
    """Test suite for event bus lifecycle management."""

    @pytest.fixture
    def event_bus(self) -> InMemoryEventBus:
        return InMemoryEventBus(max_queue_size=10, delivery_timeout_seconds=0.05)

    @pytest.mark.asyncio
    async def test_start_and_teardown(self, event_bus: InMemoryEventBus) -> None:
        """Health reflects start and teardown."""
        health = await event_bus.health_check()
        assert health["healthy"] is False
        assert health["started"] is False

        await event_bus.start()
        health = await event_bus.health_check()
        assert health["healthy"] is True

        await event_bus.teardown()
        health = await event_bus.health_check()
        assert health["started"] is False
        assert health["closed"] is True

    @pytest.mark.asyncio
    async def test_publish_before_start_raises(self, event_bus: InMemoryEventBus) -> None:
        """Publishing on a bus that was never started is rejected."""
        with pytest.raises(InfraUnavailableError, match="not started"):
            event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))

    @pytest.mark.asyncio
    async def test_shutdown_alias(self, event_bus: InMemoryEventBus) -> None:
        """shutdown() tears the bus down."""
        await event_bus.start()
        await event_bus.shutdown()
        assert (await event_bus.health_check())["started"] is False


class TestInMemoryEventBusDelivery:
    """Topic routing and subscription semantics."""

    @pytest.fixture
    def event_bus(self) -> InMemoryEventBus:
        return InMemoryEventBus(max_queue_size=10, delivery_timeout_seconds=0.05)

    @pytest.mark.asyncio
    async def test_fan_out_to_every_subscriber(self, event_bus: InMemoryEventBus) -> None:
        """Each subscriber on a topic receives its own copy."""
        await event_bus.start()
        first = event_bus.new_queue()
        second = event_bus.new_queue()
        await event_bus.subscribe(EnumCouplingTopic.COUPLED, first)
        await event_bus.subscribe(EnumCouplingTopic.COUPLED, second)

        event = ModelCoupledEvent(kind=EnumCoupledKind.PLUG, plug_config={"user": "app"})
        await event_bus.publish(event)

        assert first.get_nowait() is event
        assert second.get_nowait() is event
        await event_bus.teardown()

    @pytest.mark.asyncio
    async def test_topics_are_isolated(self, event_bus: InMemoryEventBus) -> None:
        """A subscriber only sees events on the topics it subscribed to."""
        await event_bus.start()
        queue = event_bus.new_queue()
        await event_bus.subscribe(EnumCouplingTopic.BROKEN, queue)

        await event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.SOCKET))
        assert queue.empty()

        await event_bus.publish(ModelBrokenEvent(kind=EnumCoupledKind.SOCKET))
        assert isinstance(queue.get_nowait(), ModelBrokenEvent)
        await event_bus.teardown()

    @pytest.mark.asyncio
    async def test_one_queue_on_several_topics(self, event_bus: InMemoryEventBus) -> None:
        """A single queue may listen to several topics."""
        await event_bus.start()
        queue = event_bus.new_queue()
        await event_bus.subscribe(EnumCouplingTopic.CREATED, queue)
        await event_bus.subscribe(EnumCouplingTopic.BROKEN, queue)

        await event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))
        await event_bus.publish(ModelBrokenEvent(kind=EnumCoupledKind.PLUG))

        topics = [queue.get_nowait().topic, queue.get_nowait().topic]
        assert topics == [EnumCouplingTopic.CREATED, EnumCouplingTopic.BROKEN]
        assert await event_bus.get_topics() == [
            EnumCouplingTopic.CREATED,
            EnumCouplingTopic.BROKEN,
        ]
        await event_bus.teardown()

    @pytest.mark.asyncio
    async def test_late_subscriber_misses_earlier_event(
        self, event_bus: InMemoryEventBus
    ) -> None:
        """Subscribers are snapshotted at publish time."""
        await event_bus.start()
        task = event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))
        queue = event_bus.new_queue()
        await event_bus.subscribe(EnumCouplingTopic.CREATED, queue)
        await task
        assert queue.empty()
        await event_bus.teardown()

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_delivery(self, event_bus: InMemoryEventBus) -> None:
        """The returned unsubscribe function removes the subscription."""
        await event_bus.start()
        queue = event_bus.new_queue()
        unsubscribe = await event_bus.subscribe(EnumCouplingTopic.CREATED, queue)
        assert await event_bus.get_subscriber_count(EnumCouplingTopic.CREATED) == 1

        await unsubscribe()
        await unsubscribe()
        assert await event_bus.get_subscriber_count() == 0

        await event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))
        assert queue.empty()
        await event_bus.teardown()

    @pytest.mark.asyncio
    async def test_history_filters_by_topic(self, event_bus: InMemoryEventBus) -> None:
        """History keeps published events even without subscribers."""
        await event_bus.start()
        event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))
        event_bus.publish(ModelBrokenEvent(kind=EnumCoupledKind.PLUG))
        await event_bus.flush()

        assert len(event_bus.get_event_history()) == 2
        broken = event_bus.get_event_history(topic=EnumCouplingTopic.BROKEN)
        assert [event.topic for event in broken] == [EnumCouplingTopic.BROKEN]

        event_bus.clear_event_history()
        assert event_bus.get_event_history() == []
        await event_bus.teardown()


class TestInMemoryEventBusBackpressure:
    """Full queues, close/open and teardown."""

    @pytest.mark.asyncio
    async def test_full_queue_drops_after_timeout(self) -> None:
        """A delivery to a full queue is dropped once the wait expires."""
        event_bus = InMemoryEventBus(max_queue_size=1, delivery_timeout_seconds=0.01)
        await event_bus.start()
        queue = event_bus.new_queue()
        await event_bus.subscribe(EnumCouplingTopic.CREATED, queue)

        await event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))
        await event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))

        assert queue.qsize() == 1
        assert event_bus.dropped_count == 1
        assert (await event_bus.health_check())["dropped_count"] == 1
        await event_bus.teardown()

    @pytest.mark.asyncio
    async def test_publish_does_not_block_on_full_queue(self) -> None:
        """publish() returns while the dispatch task waits for space."""
        event_bus = InMemoryEventBus(max_queue_size=1, delivery_timeout_seconds=None)
        await event_bus.start()
        queue = event_bus.new_queue()
        await event_bus.subscribe(EnumCouplingTopic.CREATED, queue)

        event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))
        blocked = event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))
        await asyncio.sleep(0)
        assert not blocked.done()

        queue.get_nowait()
        await asyncio.wait_for(blocked, timeout=1.0)
        assert queue.qsize() == 1
        await event_bus.teardown()

    @pytest.mark.asyncio
    async def test_closed_bus_suppresses_delivery(self) -> None:
        """close() suppresses deliveries until open() is called."""
        event_bus = InMemoryEventBus(max_queue_size=10)
        await event_bus.start()
        queue = event_bus.new_queue()
        await event_bus.subscribe(EnumCouplingTopic.CREATED, queue)

        event_bus.close()
        assert event_bus.is_closed is True
        await event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))
        assert queue.empty()

        event_bus.open()
        await event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))
        assert queue.qsize() == 1
        await event_bus.teardown()

    @pytest.mark.asyncio
    async def test_teardown_cancels_blocked_dispatch(self) -> None:
        """Teardown cancels dispatch tasks stuck on a full queue."""
        event_bus = InMemoryEventBus(max_queue_size=1, delivery_timeout_seconds=None)
        await event_bus.start()
        queue = event_bus.new_queue()
        await event_bus.subscribe(EnumCouplingTopic.CREATED, queue)

        event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))
        blocked = event_bus.publish(ModelCreatedEvent(kind=EnumCoupledKind.PLUG))
        await asyncio.sleep(0)

        await event_bus.teardown()
        assert blocked.cancelled()
        health = await event_bus.health_check()
        assert health["pending_dispatches"] == 0
        assert health["subscriber_count"] == 0
