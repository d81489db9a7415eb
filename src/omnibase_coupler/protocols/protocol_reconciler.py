# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocol for a reconciler driven by a controller."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from omnibase_coupler.models import ModelNamespacedName, ModelReconcileResult


@runtime_checkable
class ProtocolReconciler(Protocol):
    """One reconcile pass per work-queue key.

    ``reconcile`` returns whether and when to requeue. Raising marks the
    pass failed; the controller requeues the key with backoff.
    """

    @property
    def kind(self) -> str:
        """Kind of the objects this reconciler owns."""
        ...

    async def reconcile(self, ref: ModelNamespacedName) -> ModelReconcileResult:
        ...


__all__ = ["ProtocolReconciler"]
