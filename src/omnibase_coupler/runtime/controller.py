# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Watch-driven controller for one kind.

Lists and watches the kind, filters notifications, and feeds the keys of
changed objects to a de-duplicating work queue drained by a bounded pool
of reconcile workers.

Event Filter:
    ADDED always reconciles. MODIFIED reconciles only when the generation,
    ``spec.epoch``, ``deletionTimestamp`` or finalizers changed, so status
    writes made by the engine itself do not retrigger a pass. DELETED is
    ignored; finalizers guarantee the last pass ran on MODIFIED.

Requeue:
    ``requeue_after`` re-adds the key after the delay, ``requeue`` re-adds
    it immediately. A reconcile that raises is retried with exponential
    backoff (``backoff_base_seconds * 2**(failures - 1)``, capped at
    ``backoff_max_seconds``).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from omnibase_coupler.constants import API_VERSION
from omnibase_coupler.errors import CouplerError
from omnibase_coupler.models import ModelNamespacedName, ModelWatchEvent
from omnibase_coupler.protocols import ProtocolClusterClient, ProtocolReconciler
from omnibase_coupler.runtime.work_queue import WorkQueue

logger = logging.getLogger(__name__)

Fingerprint = tuple[int, Optional[str], Optional[str], tuple[str, ...]]


def object_key(namespace: Optional[str], name: str) -> str:
    return f"{namespace}/{name}" if namespace else name


def parse_key(key: str) -> ModelNamespacedName:
    namespace, _, name = key.rpartition("/")
    return ModelNamespacedName(name=name, namespace=namespace or None)


def fingerprint(obj: dict[str, object]) -> Fingerprint:
    """The fields whose change warrants a reconcile pass."""
    metadata = obj.get("metadata") or {}
    spec = obj.get("spec") or {}
    assert isinstance(metadata, dict) and isinstance(spec, dict)
    epoch = spec.get("epoch")
    deletion = metadata.get("deletionTimestamp")
    return (
        int(metadata.get("generation") or 0),
        None if epoch is None else str(epoch),
        None if deletion is None else str(deletion),
        tuple(metadata.get("finalizers") or ()),
    )


class Controller:
    """Runs a reconciler against watch notifications of its kind."""

    def __init__(
        self,
        client: ProtocolClusterClient,
        reconciler: ProtocolReconciler,
        api_version: str = API_VERSION,
        namespace: Optional[str] = None,
        max_concurrent_reconciles: int = 3,
        backoff_base_seconds: float = 0.5,
        backoff_max_seconds: float = 60.0,
    ) -> None:
        self._client = client
        self._reconciler = reconciler
        self._api_version = api_version
        self._namespace = namespace
        self._workers = max_concurrent_reconciles
        self._backoff_base = backoff_base_seconds
        self._backoff_max = backoff_max_seconds
        self._queue = WorkQueue(name=reconciler.kind)
        self._seen: dict[str, Fingerprint] = {}
        self._failures: dict[str, int] = {}
        self._tasks: list[asyncio.Task[None]] = []
        self._running = False

    @property
    def kind(self) -> str:
        return self._reconciler.kind

    @property
    def queue(self) -> WorkQueue:
        return self._queue

    @property
    def is_running(self) -> bool:
        return self._running

    def enqueue(self, ref: ModelNamespacedName) -> None:
        """Schedule a pass for ``ref`` regardless of the event filter."""
        self._queue.add_after(object_key(ref.namespace, ref.name), 0)

    def should_reconcile(self, event: ModelWatchEvent) -> bool:
        metadata = event.object.get("metadata") or {}
        assert isinstance(metadata, dict)
        key = object_key(metadata.get("namespace"), str(metadata.get("name", "")))
        if event.type == "DELETED":
            self._seen.pop(key, None)
            self._failures.pop(key, None)
            return False
        current = fingerprint(event.object)
        previous = self._seen.get(key)
        self._seen[key] = current
        if event.type == "ADDED":
            return True
        return previous != current

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._tasks.append(
            asyncio.create_task(self._watch(), name=f"{self.kind.lower()}-watch")
        )
        for index in range(self._workers):
            self._tasks.append(
                asyncio.create_task(
                    self._work(index), name=f"{self.kind.lower()}-worker-{index}"
                )
            )
        logger.info(
            "Controller started",
            extra={
                "kind": self.kind,
                "namespace": self._namespace,
                "workers": self._workers,
            },
        )

    async def stop(self) -> None:
        """Stop watching and let in-flight passes finish."""
        if not self._running:
            return
        self._running = False
        await self._queue.shutdown()
        watch_task, workers = self._tasks[0], self._tasks[1:]
        watch_task.cancel()
        await asyncio.gather(watch_task, return_exceptions=True)
        await asyncio.gather(*workers, return_exceptions=True)
        self._tasks = []
        logger.info("Controller stopped", extra={"kind": self.kind})

    async def _watch(self) -> None:
        attempt = 0
        while self._running:
            try:
                async for event in self._client.watch(
                    self._api_version, self.kind, self._namespace
                ):
                    attempt = 0
                    if self.should_reconcile(event):
                        metadata = event.object.get("metadata") or {}
                        assert isinstance(metadata, dict)
                        await self._queue.add(
                            object_key(metadata.get("namespace"), str(metadata.get("name", "")))
                        )
                return
            except CouplerError as e:
                attempt += 1
                delay = self._backoff(attempt)
                logger.warning(
                    "Watch failed, restarting",
                    extra={"kind": self.kind, "error": str(e), "retry_in": delay},
                )
                await asyncio.sleep(delay)

    async def _work(self, index: int) -> None:
        while True:
            key = await self._queue.get()
            if key is None:
                return
            try:
                await self._process(key)
            finally:
                await self._queue.done(key)

    async def _process(self, key: str) -> None:
        try:
            result = await self._reconciler.reconcile(parse_key(key))
        except Exception:
            failures = self._failures.get(key, 0) + 1
            self._failures[key] = failures
            delay = self._backoff(failures)
            logger.exception(
                "Reconcile failed",
                extra={"kind": self.kind, "key": key, "failures": failures, "retry_in": delay},
            )
            self._queue.add_after(key, delay)
            return

        self._failures.pop(key, None)
        if result.requeue_after is not None:
            self._queue.add_after(key, result.requeue_after)
        elif result.requeue:
            self._queue.add_after(key, 0)

    def _backoff(self, failures: int) -> float:
        return min(self._backoff_max, self._backoff_base * 2 ** (failures - 1))


__all__ = ["Controller", "fingerprint", "object_key", "parse_key"]
