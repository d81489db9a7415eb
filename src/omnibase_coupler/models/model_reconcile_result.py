# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Reconcile result: whether and when a key goes back on the work queue."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ModelReconcileResult(BaseModel):
    """Outcome of one reconcile pass.

    ``requeue_after`` takes precedence over ``requeue``; a result with
    neither set leaves the key idle until the next watch event.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    requeue: bool = Field(default=False, description="Requeue immediately")
    requeue_after: Optional[float] = Field(
        default=None,
        ge=0,
        description="Requeue after this many seconds",
    )

    @classmethod
    def done(cls) -> ModelReconcileResult:
        return cls()

    @classmethod
    def requeue_now(cls) -> ModelReconcileResult:
        return cls(requeue=True)

    @classmethod
    def requeue_in(cls, seconds: float) -> ModelReconcileResult:
        return cls(requeue=True, requeue_after=max(0.0, seconds))


__all__ = ["ModelReconcileResult"]
