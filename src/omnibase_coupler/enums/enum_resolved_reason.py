# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Resolved Condition Reason Enumeration."""

from enum import Enum


class EnumResolvedReason(str, Enum):
    """Reasons for the DeferredResource ``Resolved`` condition."""

    PENDING = "Pending"
    SUCCESS = "Success"
    ERROR = "Error"

    @property
    def default_message(self) -> str:
        """Message written when the caller supplies none."""
        if self is EnumResolvedReason.PENDING:
            return "pending"
        if self is EnumResolvedReason.SUCCESS:
            return "success"
        return "unknown error"


__all__ = ["EnumResolvedReason"]
