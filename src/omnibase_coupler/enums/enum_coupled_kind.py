# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupled Kind Enumeration."""

from enum import Enum


class EnumCoupledKind(str, Enum):
    """Which side of a coupling an event or handler concerns."""

    PLUG = "plug"
    SOCKET = "socket"


__all__ = ["EnumCoupledKind"]
