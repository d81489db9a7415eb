# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Status condition model (``metav1.Condition`` shape)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from omnibase_coupler.enums import EnumConditionStatus
from omnibase_coupler.models.model_wire_base import ModelWireBase


class ModelCondition(ModelWireBase):
    """One status condition; at most one entry per ``type`` on an object."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(..., description="Condition type (Joined, Resolved, Failed)")
    status: EnumConditionStatus = Field(..., description="True, False or Unknown")
    reason: str = Field(..., description="CamelCase machine-readable reason")
    message: str = Field(default="", description="Human-readable message")
    observed_generation: int = Field(
        default=0,
        description="Object generation this condition was computed from",
    )
    last_transition_time: Optional[datetime] = Field(
        default=None,
        description="Last time status changed",
    )

    @property
    def is_true(self) -> bool:
        return self.status == EnumConditionStatus.TRUE


__all__ = ["ModelCondition"]
