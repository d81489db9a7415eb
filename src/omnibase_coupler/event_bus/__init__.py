# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Event bus for coupling lifecycle events.

Exports:
    InMemoryEventBus: Bounded-queue topic fan-out
    CouplingEvent: Discriminated union of the lifecycle event models
"""

from omnibase_coupler.event_bus.inmemory_event_bus import EventQueue, InMemoryEventBus
from omnibase_coupler.event_bus.models import (
    CouplingEvent,
    ModelBrokenEvent,
    ModelCoupledEvent,
    ModelCouplingEventBase,
    ModelCreatedEvent,
    ModelDecoupledEvent,
    ModelDeletedEvent,
    ModelUpdatedEvent,
)

__all__: list[str] = [
    "CouplingEvent",
    "EventQueue",
    "InMemoryEventBus",
    "ModelBrokenEvent",
    "ModelCoupledEvent",
    "ModelCouplingEventBase",
    "ModelCreatedEvent",
    "ModelDecoupledEvent",
    "ModelDeletedEvent",
    "ModelUpdatedEvent",
]
