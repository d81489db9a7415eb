# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Object metadata and the generic cluster object envelope."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from omnibase_coupler.models.model_references import ModelNamespacedName
from omnibase_coupler.models.model_wire_base import ModelWireBase


class ModelObjectMeta(ModelWireBase):
    """Subset of Kubernetes ``ObjectMeta`` the engine reads and writes."""

    name: str = Field(..., description="Object name")
    namespace: Optional[str] = Field(default=None, description="Object namespace")
    uid: Optional[str] = Field(default=None, description="Store-assigned UID")
    generation: int = Field(
        default=0,
        description="Spec generation, bumped by the store on spec changes",
    )
    resource_version: Optional[str] = Field(
        default=None,
        description="Optimistic-concurrency token",
    )
    creation_timestamp: Optional[datetime] = Field(default=None)
    deletion_timestamp: Optional[datetime] = Field(default=None)
    finalizers: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)


class ModelClusterObject(ModelWireBase):
    """Envelope shared by Plug, Socket, Interface and DeferredResource."""

    api_version: str = Field(..., description="group/version of the object")
    kind: str = Field(..., description="Object kind")
    metadata: ModelObjectMeta

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> Optional[str]:
        return self.metadata.namespace

    @property
    def uid(self) -> Optional[str]:
        return self.metadata.uid

    @property
    def generation(self) -> int:
        return self.metadata.generation

    @property
    def is_deleting(self) -> bool:
        return self.metadata.deletion_timestamp is not None

    @property
    def namespaced_name(self) -> ModelNamespacedName:
        return ModelNamespacedName(name=self.name, namespace=self.namespace)

    def has_finalizer(self, finalizer: str) -> bool:
        return finalizer in self.metadata.finalizers

    def add_finalizer(self, finalizer: str) -> bool:
        """Add ``finalizer``; returns False when it was already present."""
        if finalizer in self.metadata.finalizers:
            return False
        self.metadata.finalizers.append(finalizer)
        return True

    def remove_finalizer(self, finalizer: str) -> bool:
        """Remove ``finalizer``; returns False when it was not present."""
        if finalizer not in self.metadata.finalizers:
            return False
        self.metadata.finalizers = [
            f for f in self.metadata.finalizers if f != finalizer
        ]
        return True

    def to_manifest(self) -> dict[str, object]:
        """Full wire manifest, suitable for update and update_status."""
        return self.to_wire()

    def to_template_context(self) -> dict[str, object]:
        """Wire form exposed to templates (``plug.metadata.name`` etc.)."""
        return self.to_wire()


__all__ = ["ModelClusterObject", "ModelObjectMeta"]
