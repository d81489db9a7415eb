# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Either side of a coupling."""

from __future__ import annotations

from typing import Union

from omnibase_coupler.models.model_plug import ModelPlug
from omnibase_coupler.models.model_socket import ModelSocket

CouplingObject = Union[ModelPlug, ModelSocket]

__all__ = ["CouplingObject"]
