# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""In-Memory Event Bus for coupling lifecycle events.

Routes typed coupling events to bounded ``asyncio.Queue`` subscribers per
topic. Publishing never blocks the caller: each publish snapshots the
current subscribers and hands delivery to its own task.

Features:
    - Topic-based fan-out to any number of subscriber queues
    - Bounded per-subscriber queues with a bounded delivery wait
    - Close/open toggle that suppresses deliveries per message
    - Teardown that clears subscriptions and cancels in-flight dispatch
    - Event history tracking for debugging and testing

Backpressure:
    A full subscriber queue blocks only the dispatch task delivering to it.
    The wait is bounded by ``delivery_timeout_seconds``; when it expires the
    event is dropped for that subscriber and a warning is logged. Passing
    ``delivery_timeout_seconds=None`` blocks until space frees up.

Usage:
    ```python
    bus = InMemoryEventBus(max_queue_size=100)
    await bus.start()

    queue = bus.new_queue()
    unsubscribe = await bus.subscribe(EnumCouplingTopic.COUPLED, queue)

    bus.publish(ModelCoupledEvent(kind=EnumCoupledKind.PLUG, plug=plug))
    event = await queue.get()

    await unsubscribe()
    await bus.teardown()
    ```
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Optional

from omnibase_coupler.enums import EnumCouplingTopic, EnumInfraTransportType
from omnibase_coupler.errors import InfraUnavailableError, ModelInfraErrorContext
from omnibase_coupler.event_bus.models import CouplingEvent

logger = logging.getLogger(__name__)

EventQueue = asyncio.Queue[CouplingEvent]


class InMemoryEventBus:
    """In-memory, at-most-once fan-out of coupling events.

    Attributes:
        max_queue_size: Capacity of queues created with :meth:`new_queue`
        delivery_timeout_seconds: Bounded wait on a full queue (None blocks)
        dropped_count: Deliveries dropped after the wait expired
        is_closed: Whether deliveries are currently suppressed
    """

    def __init__(
        self,
        max_queue_size: int = 100,
        delivery_timeout_seconds: Optional[float] = 30.0,
        max_history: int = 1000,
    ) -> None:
        """Initialize the in-memory event bus.

        Args:
            max_queue_size: Capacity of subscriber queues built by new_queue()
            delivery_timeout_seconds: Max wait for space in a full queue;
                None waits indefinitely
            max_history: Maximum number of events to retain in history
        """
        self._max_queue_size = max_queue_size
        self._delivery_timeout = delivery_timeout_seconds
        self._max_history = max_history

        # Topic -> subscriber queues
        self._subscribers: dict[EnumCouplingTopic, list[EventQueue]] = defaultdict(
            list
        )

        # Event history for debugging (circular buffer behavior)
        self._event_history: list[CouplingEvent] = []

        # In-flight dispatch tasks, cancelled on teardown
        self._dispatch_tasks: set[asyncio.Task[None]] = set()

        self._lock = asyncio.Lock()
        self._started = False
        self._closed = False
        self._dropped = 0

    @property
    def max_queue_size(self) -> int:
        return self._max_queue_size

    @property
    def delivery_timeout_seconds(self) -> Optional[float]:
        return self._delivery_timeout

    @property
    def dropped_count(self) -> int:
        return self._dropped

    @property
    def is_closed(self) -> bool:
        return self._closed

    def new_queue(self) -> EventQueue:
        """Build a subscriber queue with the configured capacity."""
        return asyncio.Queue(maxsize=self._max_queue_size)

    async def start(self) -> None:
        """Mark the bus ready and open for delivery."""
        async with self._lock:
            self._started = True
            self._closed = False
        logger.info(
            "InMemoryEventBus started",
            extra={
                "max_queue_size": self._max_queue_size,
                "delivery_timeout_seconds": self._delivery_timeout,
            },
        )

    async def shutdown(self) -> None:
        """Gracefully shutdown the event bus."""
        await self.teardown()

    async def subscribe(
        self,
        topic: EnumCouplingTopic,
        queue: EventQueue,
    ) -> Callable[[], Awaitable[None]]:
        """Register ``queue`` to receive every event published on ``topic``.

        One queue may be subscribed to several topics. Returns an async
        unsubscribe function.
        """
        async with self._lock:
            self._subscribers[topic].append(queue)
            logger.debug("Subscriber added", extra={"topic": topic.value})

        async def unsubscribe() -> None:
            """Remove this subscription from the topic."""
            async with self._lock:
                subscribers = self._subscribers.get(topic, [])
                if queue in subscribers:
                    subscribers.remove(queue)
                    logger.debug("Subscriber removed", extra={"topic": topic.value})

        return unsubscribe

    def publish(self, event: CouplingEvent) -> asyncio.Task[None]:
        """Schedule delivery of ``event`` to the current subscribers.

        Returns immediately with the dispatch task. Subscribers registered
        after this call do not receive the event.

        Raises:
            InfraUnavailableError: If the bus has not been started
        """
        if not self._started:
            context = ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.RUNTIME,
                operation="publish",
                target_name=event.topic.value,
                correlation_id=event.correlation_id,
            )
            raise InfraUnavailableError(
                "InMemoryEventBus not started. Call start() first.",
                context=context,
            )

        self._event_history.append(event)
        if len(self._event_history) > self._max_history:
            self._event_history.pop(0)

        subscribers = list(self._subscribers.get(event.topic, []))
        task = asyncio.create_task(
            self._dispatch(event, subscribers),
            name=f"coupling-event-{event.topic.value}",
        )
        self._dispatch_tasks.add(task)
        task.add_done_callback(self._dispatch_tasks.discard)
        return task

    async def _dispatch(self, event: CouplingEvent, queues: list[EventQueue]) -> None:
        for queue in queues:
            if self._closed:
                logger.debug(
                    "Delivery suppressed, bus closed",
                    extra={
                        "topic": event.topic.value,
                        "correlation_id": str(event.correlation_id),
                    },
                )
                return
            if self._delivery_timeout is None:
                await queue.put(event)
                continue
            try:
                await asyncio.wait_for(queue.put(event), timeout=self._delivery_timeout)
            except TimeoutError:
                self._dropped += 1
                logger.warning(
                    "Subscriber queue full, event dropped",
                    extra={
                        "topic": event.topic.value,
                        "correlation_id": str(event.correlation_id),
                        "timeout_seconds": self._delivery_timeout,
                        "queue_size": queue.qsize(),
                    },
                )

    async def flush(self) -> None:
        """Wait for every in-flight dispatch task to finish."""
        while self._dispatch_tasks:
            await asyncio.gather(*list(self._dispatch_tasks), return_exceptions=True)

    def close(self) -> None:
        """Suppress deliveries; already scheduled dispatches stop at the next message."""
        self._closed = True
        logger.info("InMemoryEventBus closed")

    def open(self) -> None:
        """Resume deliveries after :meth:`close`."""
        self._closed = False
        logger.info("InMemoryEventBus opened")

    async def teardown(self) -> None:
        """Close the bus, clear all subscriptions and cancel pending dispatch."""
        self.close()
        async with self._lock:
            self._subscribers.clear()
            self._started = False
        pending = list(self._dispatch_tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._dispatch_tasks.clear()
        logger.info(
            "InMemoryEventBus torn down",
            extra={"cancelled_dispatches": len(pending)},
        )

    async def health_check(self) -> dict[str, object]:
        """Check event bus health.

        Returns:
            Dictionary with health status information:
                - healthy: Whether the bus is started and open
                - started: Whether start() has been called
                - closed: Whether deliveries are suppressed
                - subscriber_count: Total number of active subscriptions
                - topic_count: Number of topics with subscribers
                - pending_dispatches: In-flight dispatch tasks
                - dropped_count: Deliveries dropped on a full queue
                - history_size: Current event history size
        """
        async with self._lock:
            subscriber_count = sum(len(subs) for subs in self._subscribers.values())
            topic_count = len([subs for subs in self._subscribers.values() if subs])

        return {
            "healthy": self._started and not self._closed,
            "started": self._started,
            "closed": self._closed,
            "subscriber_count": subscriber_count,
            "topic_count": topic_count,
            "pending_dispatches": len(self._dispatch_tasks),
            "dropped_count": self._dropped,
            "history_size": len(self._event_history),
        }

    # =========================================================================
    # Debugging/Observability Methods
    # =========================================================================

    def get_event_history(
        self,
        limit: int = 100,
        topic: Optional[EnumCouplingTopic] = None,
    ) -> list[CouplingEvent]:
        """Get recent events, most recent last."""
        history = self._event_history
        if topic is not None:
            history = [event for event in history if event.topic is topic]
        return list(history[-limit:])

    def clear_event_history(self) -> None:
        """Clear event history.

        Useful for test isolation between test cases.
        """
        self._event_history.clear()
        logger.debug("Event history cleared")

    async def get_subscriber_count(
        self, topic: Optional[EnumCouplingTopic] = None
    ) -> int:
        async with self._lock:
            if topic is not None:
                return len(self._subscribers.get(topic, []))
            return sum(len(subs) for subs in self._subscribers.values())

    async def get_topics(self) -> list[EnumCouplingTopic]:
        """Get topics with at least one subscriber."""
        async with self._lock:
            return [topic for topic, subs in self._subscribers.items() if subs]


__all__: list[str] = ["EventQueue", "InMemoryEventBus"]
