# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Pytest configuration and shared fixtures for omnibase_coupler tests."""

from __future__ import annotations

import pytest

from omnibase_coupler.event_bus import InMemoryEventBus
from omnibase_coupler.models import ModelCouplerConfig
from omnibase_coupler.testing import InMemoryClusterClient
from tests.helpers.deterministic import DeterministicClock


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def cluster(clock: DeterministicClock) -> InMemoryClusterClient:
    """Fresh in-memory cluster store sharing the test clock."""
    return InMemoryClusterClient(clock=clock)


@pytest.fixture
def coupler_config() -> ModelCouplerConfig:
    return ModelCouplerConfig(
        pending_requeue_seconds=5.0,
        apply_retry_attempts=3,
        apply_retry_interval_seconds=0.0,
    )


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus(max_queue_size=100, delivery_timeout_seconds=1.0)
