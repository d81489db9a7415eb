# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupling Event Topic Enumeration.

Topics double as the apparatus webhook event names (``<endpoint>/<topic>``).
"""

from enum import Enum


class EnumCouplingTopic(str, Enum):
    """Event bus topics for coupling lifecycle events."""

    CREATED = "created"
    COUPLED = "coupled"
    UPDATED = "updated"
    DECOUPLED = "decoupled"
    DELETED = "deleted"
    BROKEN = "broken"


__all__ = ["EnumCouplingTopic"]
