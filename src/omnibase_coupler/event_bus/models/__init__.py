# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Event bus models."""

from omnibase_coupler.event_bus.models.model_coupling_event import (
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
    "ModelBrokenEvent",
    "ModelCoupledEvent",
    "ModelCouplingEventBase",
    "ModelCreatedEvent",
    "ModelDecoupledEvent",
    "ModelDeletedEvent",
    "ModelUpdatedEvent",
]
