# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""DeferredResource model: a manifest applied once a timeout elapsed and
its dependencies exist."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from omnibase_coupler.constants import API_VERSION, KIND_DEFERRED_RESOURCE
from omnibase_coupler.models.model_condition import ModelCondition
from omnibase_coupler.models.model_object_meta import ModelClusterObject
from omnibase_coupler.models.model_references import (
    ModelObjectReference,
    ModelOwnerReference,
)
from omnibase_coupler.models.model_wire_base import ModelWireBase


class ModelDeferredResourceSpec(ModelWireBase):
    timeout: int = Field(default=0, ge=0, description="Seconds after creation")
    wait_for: list[ModelObjectReference] = Field(default_factory=list)
    resource: Optional[dict[str, object]] = Field(
        default=None,
        description="Raw manifest to apply",
    )
    service_account_name: Optional[str] = None


class ModelDeferredResourceStatus(ModelWireBase):
    conditions: list[ModelCondition] = Field(default_factory=list)
    owner_reference: Optional[ModelOwnerReference] = None


class ModelDeferredResource(ModelClusterObject):
    api_version: str = API_VERSION
    kind: str = KIND_DEFERRED_RESOURCE
    spec: ModelDeferredResourceSpec = Field(default_factory=ModelDeferredResourceSpec)
    status: ModelDeferredResourceStatus = Field(
        default_factory=ModelDeferredResourceStatus
    )


__all__ = [
    "ModelDeferredResource",
    "ModelDeferredResourceSpec",
    "ModelDeferredResourceStatus",
]
