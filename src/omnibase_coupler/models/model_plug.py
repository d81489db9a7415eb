# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Plug model: the capability consumer side of a coupling."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from omnibase_coupler.constants import API_VERSION, KIND_PLUG
from omnibase_coupler.enums import EnumPhase
from omnibase_coupler.models.model_condition import ModelCondition
from omnibase_coupler.models.model_coupling_spec import ModelCouplingSpec
from omnibase_coupler.models.model_object_meta import ModelClusterObject
from omnibase_coupler.models.model_references import (
    ModelCoupledReference,
    ModelNamespacedName,
)
from omnibase_coupler.models.model_wire_base import ModelWireBase


class ModelPlugSpec(ModelCouplingSpec):
    socket: ModelNamespacedName = Field(..., description="Socket to couple to")
    interface: Optional[ModelNamespacedName] = Field(
        default=None,
        description="Interface the plug expects; defaults to the socket's",
    )


class ModelCoupledResult(ModelWireBase):
    """Validated result maps of both sides, stamped with the plug generation."""

    plug: dict[str, str] = Field(default_factory=dict)
    socket: dict[str, str] = Field(default_factory=dict)
    observed_generation: int = 0


class ModelPlugStatus(ModelWireBase):
    phase: Optional[EnumPhase] = None
    message: Optional[str] = None
    conditions: list[ModelCondition] = Field(default_factory=list)
    coupled_socket: Optional[ModelCoupledReference] = None
    coupled_result: Optional[ModelCoupledResult] = None


class ModelPlug(ModelClusterObject):
    api_version: str = API_VERSION
    kind: str = KIND_PLUG
    spec: ModelPlugSpec
    status: ModelPlugStatus = Field(default_factory=ModelPlugStatus)

    def socket_ref(self) -> ModelNamespacedName:
        """Socket reference with the namespace defaulted to the plug's."""
        return self.spec.socket.with_default_namespace(self.namespace)

    def as_coupled_reference(self) -> ModelCoupledReference:
        return ModelCoupledReference(
            api_version=self.api_version,
            kind=self.kind,
            name=self.name,
            namespace=self.namespace,
            uid=self.uid,
        )


__all__ = ["ModelCoupledResult", "ModelPlug", "ModelPlugSpec", "ModelPlugStatus"]
