# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupling Phase Enumeration."""

from enum import Enum


class EnumPhase(str, Enum):
    """Coarse lifecycle phase recorded on Plug and Socket status.

    Attributes:
        PENDING: Waiting on a dependency or coupling in progress
        SUCCEEDED: Plug coupled to its Socket
        FAILED: Last reconcile pass hit a non-transient error
        UNKNOWN: Phase could not be determined
        READY: Socket resolved its Interface and accepts plugs
    """

    PENDING = "Pending"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"
    READY = "Ready"


__all__ = ["EnumPhase"]
