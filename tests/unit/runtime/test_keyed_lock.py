# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Tests for KeyedLock."""

from __future__ import annotations

import asyncio

import pytest

from omnibase_coupler.runtime.keyed_lock import KeyedLock


class TestKeyedLock:
    @pytest.mark.asyncio
    async def test_same_key_is_serialized(self) -> None:
        locks = KeyedLock()
        order: list[str] = []

        async def worker(tag: str) -> None:
            async with locks.hold("plug/default/app"):
                order.append(f"{tag}-enter")
                await asyncio.sleep(0)
                await asyncio.sleep(0)
                order.append(f"{tag}-exit")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a-enter", "a-exit", "b-enter", "b-exit"]

    @pytest.mark.asyncio
    async def test_different_keys_run_concurrently(self) -> None:
        locks = KeyedLock()
        inside = asyncio.Event()
        release = asyncio.Event()

        async def holder() -> None:
            async with locks.hold("socket/default/db"):
                inside.set()
                await release.wait()

        task = asyncio.create_task(holder())
        await inside.wait()

        async with locks.hold("plug/default/app"):
            assert locks.locked("socket/default/db")
            assert locks.locked("plug/default/app")

        release.set()
        await task

    @pytest.mark.asyncio
    async def test_locks_are_released_when_unused(self) -> None:
        """The map only holds keys with a holder or a waiter."""
        locks = KeyedLock()
        async with locks.hold("a"):
            assert len(locks) == 1
        assert len(locks) == 0
        assert not locks.locked("a")

    @pytest.mark.asyncio
    async def test_lock_released_on_error(self) -> None:
        locks = KeyedLock()
        with pytest.raises(RuntimeError):
            async with locks.hold("a"):
                raise RuntimeError("boom")

        assert len(locks) == 0
        async with locks.hold("a"):
            pass
