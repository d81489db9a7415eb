# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Templated resource actions gated by lifecycle hooks."""

from __future__ import annotations

from typing import Optional

from pydantic import ConfigDict, Field

from omnibase_coupler.enums import EnumResourceDo, EnumWhen
from omnibase_coupler.models.model_wire_base import ModelWireBase


class ModelResourceAction(ModelWireBase):
    """What to do with one or more templated manifests.

    Exactly one of the four template fields is normally set; when several
    are, all of them are rendered in declaration order.
    """

    model_config = ConfigDict(frozen=True)

    do: EnumResourceDo = Field(default=EnumResourceDo.APPLY)
    template: Optional[dict[str, object]] = Field(default=None)
    templates: Optional[list[dict[str, object]]] = Field(default=None)
    string_template: Optional[str] = Field(default=None)
    string_templates: Optional[list[str]] = Field(default=None)


class ModelResource(ModelResourceAction):
    """A resource action attached to lifecycle hooks."""

    when: list[EnumWhen] = Field(default_factory=list)
    retain_when_decoupled: bool = Field(
        default=False,
        description="Skip ``apply`` actions when running the decoupled hook",
    )

    def runs_on(self, when: EnumWhen) -> bool:
        target = when.normalized()
        return any(w.normalized() is target for w in self.when)


__all__ = ["ModelResource", "ModelResourceAction"]
