# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""De-duplicating work queue with delayed re-add.

Keys are namespaced names. A key is queued at most once; a key that is
being processed and gets re-added is queued again only after the worker
calls :meth:`done`, so one key is never processed by two workers at once.

Delayed re-adds (:meth:`add_after`) keep the earliest pending deadline per
key.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Optional

logger = logging.getLogger(__name__)


class WorkQueue:
    """FIFO of unique keys with processing and shutdown tracking."""

    def __init__(self, name: str = "work-queue") -> None:
        self._name = name
        self._queue: deque[str] = deque()
        self._queued: set[str] = set()
        self._processing: set[str] = set()
        self._dirty: set[str] = set()
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._deadlines: dict[str, float] = {}
        self._pending_adds: set[asyncio.Task[None]] = set()
        self._condition = asyncio.Condition()
        self._shutting_down = False

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def is_shutting_down(self) -> bool:
        return self._shutting_down

    def is_pending(self, key: str) -> bool:
        return key in self._queued or key in self._dirty or key in self._timers

    async def add(self, key: str) -> None:
        if self._shutting_down:
            return
        async with self._condition:
            if key in self._processing:
                self._dirty.add(key)
                return
            if key in self._queued:
                return
            self._queued.add(key)
            self._queue.append(key)
            self._condition.notify()

    def add_after(self, key: str, delay_seconds: float) -> None:
        """Queue ``key`` after ``delay_seconds``; earlier deadlines win."""
        if self._shutting_down:
            return
        if delay_seconds <= 0:
            self._spawn_add(key)
            return
        loop = asyncio.get_running_loop()
        deadline = loop.time() + delay_seconds
        existing = self._deadlines.get(key)
        if existing is not None and existing <= deadline:
            return
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        self._deadlines[key] = deadline
        self._timers[key] = loop.call_at(deadline, self._fire, key)

    async def get(self) -> Optional[str]:
        """Next key to process, or None once the queue shuts down."""
        async with self._condition:
            while not self._queue and not self._shutting_down:
                await self._condition.wait()
            if self._shutting_down:
                return None
            key = self._queue.popleft()
            self._queued.discard(key)
            self._processing.add(key)
            return key

    async def done(self, key: str) -> None:
        """Mark ``key`` processed; re-queue it if it was added meanwhile."""
        async with self._condition:
            self._processing.discard(key)
            if key in self._dirty:
                self._dirty.discard(key)
                if key not in self._queued:
                    self._queued.add(key)
                    self._queue.append(key)
                    self._condition.notify()

    async def shutdown(self) -> None:
        self._shutting_down = True
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._deadlines.clear()
        async with self._condition:
            self._condition.notify_all()
        logger.debug("Work queue shut down", extra={"queue": self._name})

    def _fire(self, key: str) -> None:
        self._timers.pop(key, None)
        self._deadlines.pop(key, None)
        self._spawn_add(key)

    def _spawn_add(self, key: str) -> None:
        task = asyncio.get_running_loop().create_task(self.add(key))
        self._pending_adds.add(task)
        task.add_done_callback(self._pending_adds.discard)
        task.add_done_callback(_log_add_failure)


def _log_add_failure(task: asyncio.Task[None]) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("Delayed enqueue failed", exc_info=task.exception())


__all__ = ["WorkQueue"]
