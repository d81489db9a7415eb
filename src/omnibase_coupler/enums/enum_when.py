# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Lifecycle Hook Enumeration.

Gates templated resource actions to the lifecycle point they run at.
"""

from __future__ import annotations

from enum import Enum


class EnumWhen(str, Enum):
    """Lifecycle hooks a resource action can be attached to.

    ``UPDATED`` is accepted on the wire as a synonym of ``CHANGED``;
    use :meth:`normalized` before comparing.
    """

    CREATED = "created"
    COUPLED = "coupled"
    CHANGED = "changed"
    UPDATED = "updated"
    DECOUPLED = "decoupled"
    DELETED = "deleted"

    def normalized(self) -> EnumWhen:
        """Collapse synonyms onto one canonical hook."""
        if self is EnumWhen.UPDATED:
            return EnumWhen.CHANGED
        return self


__all__ = ["EnumWhen"]
