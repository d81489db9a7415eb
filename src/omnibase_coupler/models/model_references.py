# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Reference models pointing at other cluster objects."""

from __future__ import annotations

from typing import Optional

from pydantic import ConfigDict, Field

from omnibase_coupler.models.model_wire_base import ModelWireBase


class ModelNamespacedName(ModelWireBase):
    """Name plus optional namespace; the namespace defaults per call site."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Object name")
    namespace: Optional[str] = Field(default=None, description="Object namespace")

    def with_default_namespace(self, namespace: Optional[str]) -> ModelNamespacedName:
        """Return a copy whose namespace falls back to ``namespace``."""
        if self.namespace:
            return self
        return ModelNamespacedName(name=self.name, namespace=namespace)

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name


class ModelObjectReference(ModelWireBase):
    """Reference by kind and name, as used by Vars and ``waitFor``.

    Either ``api_version`` or ``group``/``version`` identifies the API;
    :meth:`resolved_api_version` folds them into one string.
    """

    model_config = ConfigDict(frozen=True)

    api_version: Optional[str] = Field(default=None)
    group: Optional[str] = Field(default=None)
    version: Optional[str] = Field(default=None)
    kind: str = Field(..., description="Referenced kind")
    name: str = Field(..., description="Referenced object name")
    namespace: Optional[str] = Field(default=None)

    def resolved_api_version(self) -> str:
        if self.api_version:
            return self.api_version
        if self.group:
            return f"{self.group}/{self.version or ''}".rstrip("/")
        return self.version or "v1"


class ModelCoupledReference(ModelWireBase):
    """Identity of the other side of a coupling (``coupledSocket`` and
    the entries of ``coupledPlugs``)."""

    model_config = ConfigDict(frozen=True)

    api_version: str
    kind: str
    name: str
    namespace: Optional[str] = None
    uid: Optional[str] = None


class ModelOwnerReference(ModelWireBase):
    """Identity of the object a DeferredResource applied."""

    model_config = ConfigDict(frozen=True)

    api_version: str
    kind: str
    name: str
    uid: Optional[str] = None


__all__ = [
    "ModelCoupledReference",
    "ModelNamespacedName",
    "ModelObjectReference",
    "ModelOwnerReference",
]
