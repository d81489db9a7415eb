# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Socket model: the capability provider side of a coupling."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from omnibase_coupler.constants import API_VERSION, KIND_SOCKET
from omnibase_coupler.enums import EnumPhase
from omnibase_coupler.models.model_condition import ModelCondition
from omnibase_coupler.models.model_coupling_spec import ModelCouplingSpec
from omnibase_coupler.models.model_object_meta import ModelClusterObject
from omnibase_coupler.models.model_references import (
    ModelCoupledReference,
    ModelNamespacedName,
)
from omnibase_coupler.models.model_wire_base import ModelWireBase


class ModelSocketValidation(ModelWireBase):
    """Namespace admission rules. An empty whitelist admits every namespace."""

    namespace_whitelist: list[str] = Field(default_factory=list)
    namespace_blacklist: list[str] = Field(default_factory=list)


class ModelSocketSpec(ModelCouplingSpec):
    interface: Optional[ModelNamespacedName] = Field(
        default=None,
        description="Interface this socket implements",
    )
    limit: int = Field(default=0, ge=0, description="Max coupled plugs; 0 is unlimited")
    validation: Optional[ModelSocketValidation] = None


class ModelSocketStatus(ModelWireBase):
    phase: Optional[EnumPhase] = None
    message: Optional[str] = None
    ready: bool = False
    conditions: list[ModelCondition] = Field(default_factory=list)
    coupled_plugs: list[ModelCoupledReference] = Field(default_factory=list)

    def has_coupled_plug(self, uid: Optional[str]) -> bool:
        return uid is not None and any(p.uid == uid for p in self.coupled_plugs)


class ModelSocket(ModelClusterObject):
    api_version: str = API_VERSION
    kind: str = KIND_SOCKET
    spec: ModelSocketSpec = Field(default_factory=ModelSocketSpec)
    status: ModelSocketStatus = Field(default_factory=ModelSocketStatus)

    def as_coupled_reference(self) -> ModelCoupledReference:
        return ModelCoupledReference(
            api_version=self.api_version,
            kind=self.kind,
            name=self.name,
            namespace=self.namespace,
            uid=self.uid,
        )

    def add_coupled_plug(self, plug: ModelCoupledReference) -> bool:
        """Append ``plug`` unless its UID is already present."""
        if self.status.has_coupled_plug(plug.uid):
            return False
        self.status.coupled_plugs.append(plug)
        return True

    def remove_coupled_plug(self, uid: Optional[str]) -> bool:
        """Drop every entry with ``uid``; returns False when none matched."""
        remaining = [p for p in self.status.coupled_plugs if p.uid != uid]
        if len(remaining) == len(self.status.coupled_plugs):
            return False
        self.status.coupled_plugs = remaining
        return True


__all__ = [
    "ModelSocket",
    "ModelSocketSpec",
    "ModelSocketStatus",
    "ModelSocketValidation",
]
