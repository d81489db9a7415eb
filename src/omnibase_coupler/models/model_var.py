# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Var model: a named field lifted from another cluster object."""

from __future__ import annotations

from pydantic import ConfigDict, Field

from omnibase_coupler.models.model_references import ModelObjectReference
from omnibase_coupler.models.model_wire_base import ModelWireBase


class ModelFieldSelector(ModelWireBase):
    model_config = ConfigDict(frozen=True)

    field_path: str = Field(default="", description="Dotted path into the object")


class ModelVar(ModelWireBase):
    """``{name, objref, fieldref}``: resolved at reconcile time."""

    model_config = ConfigDict(frozen=True)

    name: str
    objref: ModelObjectReference
    fieldref: ModelFieldSelector = Field(default_factory=ModelFieldSelector)


__all__ = ["ModelFieldSelector", "ModelVar"]
