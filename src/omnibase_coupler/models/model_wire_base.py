# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Wire Base Model.

Cluster objects travel as camelCase JSON. Models declare snake_case fields
and derive the camelCase wire names through an alias generator; unknown
keys are preserved so an object read from the store can be written back
without losing fields this package does not model.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ModelWireBase(BaseModel):
    """Base for every model that is parsed from or written to the store."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_wire(self) -> dict[str, object]:
        """Serialize to the camelCase JSON shape used on the wire."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


__all__ = ["ModelWireBase"]
