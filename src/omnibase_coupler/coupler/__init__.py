# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupling state machine and its collaborators.

Exports:
    CouplerEngine: Plug/Socket reconcile passes, couple and decouple
    CouplerHandlers: Apparatus notifications and lifecycle resources
    CouplerEventWorkers: Bus consumers for advisory events
    CouplerStatusWriter: Plug/Socket status subresource writes
"""

from omnibase_coupler.coupler.coupler_engine import (
    COUPLING_FAILURES,
    CouplerEngine,
    lock_key,
)
from omnibase_coupler.coupler.coupler_event_workers import (
    ADVISORY_TOPICS,
    CouplerEventWorkers,
)
from omnibase_coupler.coupler.coupler_handlers import CouplerHandlers
from omnibase_coupler.coupler.coupler_status import (
    CouplerStatusWriter,
    socket_coupled_message,
)

__all__: list[str] = [
    "ADVISORY_TOPICS",
    "COUPLING_FAILURES",
    "CouplerEngine",
    "CouplerEventWorkers",
    "CouplerHandlers",
    "CouplerStatusWriter",
    "lock_key",
    "socket_coupled_message",
]
