# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Interface model: the schema a Plug and Socket exchange maps against."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from omnibase_coupler.constants import API_VERSION, KIND_INTERFACE
from omnibase_coupler.enums import EnumCoupledKind
from omnibase_coupler.models.model_object_meta import ModelClusterObject
from omnibase_coupler.models.model_wire_base import ModelWireBase


class ModelSchemaProperty(ModelWireBase):
    default: Optional[str] = None
    description: Optional[str] = None
    required: bool = False


class ModelInterfaceSides(ModelWireBase):
    """Per-side property maps. ``None`` means the side is not validated."""

    plug: Optional[dict[str, ModelSchemaProperty]] = None
    socket: Optional[dict[str, ModelSchemaProperty]] = None

    def for_side(
        self, side: EnumCoupledKind
    ) -> Optional[dict[str, ModelSchemaProperty]]:
        return self.plug if side is EnumCoupledKind.PLUG else self.socket


class ModelInterfaceSpec(ModelWireBase):
    config: ModelInterfaceSides = Field(default_factory=ModelInterfaceSides)
    result: ModelInterfaceSides = Field(default_factory=ModelInterfaceSides)


class ModelInterface(ModelClusterObject):
    api_version: str = API_VERSION
    kind: str = KIND_INTERFACE
    spec: ModelInterfaceSpec = Field(default_factory=ModelInterfaceSpec)


__all__ = [
    "ModelInterface",
    "ModelInterfaceSides",
    "ModelInterfaceSpec",
    "ModelSchemaProperty",
]
