# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Watch event delivered by a cluster client's ``watch`` stream."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

WatchEventType = Literal["ADDED", "MODIFIED", "DELETED"]


class ModelWatchEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: WatchEventType
    # ``object`` shadows the builtin within this class body.
    object: dict[str, Any] = Field(..., description="Object manifest")


__all__ = ["ModelWatchEvent", "WatchEventType"]
