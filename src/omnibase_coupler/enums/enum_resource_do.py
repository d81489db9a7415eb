# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Resource Action Enumeration."""

from enum import Enum


class EnumResourceDo(str, Enum):
    """What a resource action does with its rendered manifests.

    Attributes:
        APPLY: Server-side apply (create or patch)
        DELETE: Delete, tolerating not-found
        RECREATE: Delete then create
    """

    APPLY = "apply"
    DELETE = "delete"
    RECREATE = "recreate"


__all__ = ["EnumResourceDo"]
