# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Socket reconciler: hands each Socket key to the coupling engine."""

from __future__ import annotations

from omnibase_coupler.constants import KIND_SOCKET
from omnibase_coupler.coupler.coupler_engine import CouplerEngine
from omnibase_coupler.models import ModelNamespacedName, ModelReconcileResult


class ReconcilerSocket:
    def __init__(self, engine: CouplerEngine) -> None:
        self._engine = engine

    @property
    def kind(self) -> str:
        return KIND_SOCKET

    async def reconcile(self, ref: ModelNamespacedName) -> ModelReconcileResult:
        return await self._engine.reconcile_socket(ref)


__all__ = ["ReconcilerSocket"]
