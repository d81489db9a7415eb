# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Status Condition Status Enumeration."""

from enum import Enum


class EnumConditionStatus(str, Enum):
    """Tri-state condition status."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


__all__ = ["EnumConditionStatus"]
