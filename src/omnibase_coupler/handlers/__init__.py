# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Handlers for the external systems the engine talks to.

Handlers:
    - HandlerKubernetesCluster: cluster API via the kubernetes dynamic client
    - HandlerApparatus: apparatus webhooks via httpx
"""

from omnibase_coupler.handlers.handler_apparatus import HandlerApparatus
from omnibase_coupler.handlers.handler_kubernetes_cluster import (
    HandlerKubernetesCluster,
)

__all__: list[str] = ["HandlerApparatus", "HandlerKubernetesCluster"]
