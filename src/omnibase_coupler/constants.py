# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""API, finalizer and apply constants for the coupling engine.

These strings are part of the cluster-visible contract: changing them
orphans finalizers and field ownership held by running objects.
"""

from __future__ import annotations

from typing import Final

# ==============================================================================
# API identity
# ==============================================================================

API_GROUP: Final[str] = "integration.rock8s.com"
API_VERSION_NAME: Final[str] = "v1beta1"
API_VERSION: Final[str] = f"{API_GROUP}/{API_VERSION_NAME}"

KIND_PLUG: Final[str] = "Plug"
KIND_SOCKET: Final[str] = "Socket"
KIND_INTERFACE: Final[str] = "Interface"
KIND_DEFERRED_RESOURCE: Final[str] = "DeferredResource"

# ==============================================================================
# Finalizers
# ==============================================================================
# One string shared by every kind the engine owns. Deletion of a Plug,
# Socket or DeferredResource is held until the matching cleanup ran.

FINALIZER: Final[str] = f"{API_GROUP}/finalizer"
PLUG_FINALIZER: Final[str] = FINALIZER
SOCKET_FINALIZER: Final[str] = FINALIZER
DEFERRED_RESOURCE_FINALIZER: Final[str] = FINALIZER

# ==============================================================================
# Server-side apply
# ==============================================================================

FIELD_MANAGER: Final[str] = "integration-operator"

# ==============================================================================
# Apparatus protocol
# ==============================================================================

APPARATUS_PROTOCOL_VERSION: Final[str] = "1"
APPARATUS_CONFIG_PATH: Final[str] = "config"

__all__: list[str] = [
    "API_GROUP",
    "API_VERSION",
    "API_VERSION_NAME",
    "APPARATUS_CONFIG_PATH",
    "APPARATUS_PROTOCOL_VERSION",
    "DEFERRED_RESOURCE_FINALIZER",
    "FIELD_MANAGER",
    "FINALIZER",
    "KIND_DEFERRED_RESOURCE",
    "KIND_INTERFACE",
    "KIND_PLUG",
    "KIND_SOCKET",
    "PLUG_FINALIZER",
    "SOCKET_FINALIZER",
]
