# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Per-key exclusive locks.

One ``asyncio.Lock`` per key, created on first use and released once no
holder or waiter references it, so the map stays as large as the set of
keys currently in flight.

Usage:
    ```python
    locks = KeyedLock()
    async with locks.hold("plug/default/app"):
        ...
    ```
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class KeyedLock:
    """Map of reference-counted locks keyed by string."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._refs: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._refs[key] = self._refs.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._refs[key] -= 1
            if self._refs[key] == 0:
                del self._refs[key]
                del self._locks[key]


__all__ = ["KeyedLock"]
