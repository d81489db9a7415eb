# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Status Condition Type Enumeration."""

from enum import Enum


class EnumConditionType(str, Enum):
    """Condition types written to object status.

    Attributes:
        JOINED: Plug/Socket coupling progress
        RESOLVED: DeferredResource progress
        FAILED: Set when a reconcile pass failed with an error
    """

    JOINED = "Joined"
    RESOLVED = "Resolved"
    FAILED = "Failed"


__all__ = ["EnumConditionType"]
