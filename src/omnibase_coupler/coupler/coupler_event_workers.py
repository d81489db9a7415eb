# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Bus consumers for advisory lifecycle events.

``created`` and ``broken`` notifications are advisory: the reconcile pass
publishes them and moves on. A pool of workers drains one shared
subscriber queue and runs the matching hook; a failing hook is logged and
the worker continues with the next event.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from omnibase_coupler.coupler.coupler_handlers import CouplerHandlers
from omnibase_coupler.enums import EnumCouplingTopic
from omnibase_coupler.event_bus import EventQueue, InMemoryEventBus

logger = logging.getLogger(__name__)

ADVISORY_TOPICS: tuple[EnumCouplingTopic, ...] = (
    EnumCouplingTopic.CREATED,
    EnumCouplingTopic.BROKEN,
)


class CouplerEventWorkers:
    """Worker pool consuming advisory events from the bus."""

    def __init__(
        self,
        bus: InMemoryEventBus,
        handlers: CouplerHandlers,
        max_workers: int = 1,
        topics: tuple[EnumCouplingTopic, ...] = ADVISORY_TOPICS,
    ) -> None:
        self._bus = bus
        self._handlers = handlers
        self._max_workers = max_workers
        self._topics = topics
        self._queue: EventQueue = bus.new_queue()
        self._unsubscribers: list[Callable[[], Awaitable[None]]] = []
        self._tasks: list[asyncio.Task[None]] = []
        self.failed_count = 0

    @property
    def is_running(self) -> bool:
        return bool(self._tasks)

    async def start(self) -> None:
        if self._tasks:
            return
        for topic in self._topics:
            self._unsubscribers.append(await self._bus.subscribe(topic, self._queue))
        self._tasks = [
            asyncio.create_task(self._work(index), name=f"coupler-event-worker-{index}")
            for index in range(self._max_workers)
        ]
        logger.info(
            "Event workers started",
            extra={
                "workers": self._max_workers,
                "topics": [topic.value for topic in self._topics],
            },
        )

    async def drain(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            await unsubscribe()
        self._unsubscribers.clear()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Event workers stopped")

    async def _work(self, index: int) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._handlers.handle_event(event)
            except Exception:
                self.failed_count += 1
                logger.exception(
                    "Lifecycle hook failed",
                    extra={
                        "worker": index,
                        "topic": event.topic.value,
                        "kind": event.kind.value,
                        "correlation_id": str(event.correlation_id),
                    },
                )
            finally:
                self._queue.task_done()


__all__ = ["ADVISORY_TOPICS", "CouplerEventWorkers"]
