# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocols implemented by coupler collaborators."""

from omnibase_coupler.protocols.protocol_cluster_client import ProtocolClusterClient
from omnibase_coupler.protocols.protocol_reconciler import ProtocolReconciler

__all__: list[str] = ["ProtocolClusterClient", "ProtocolReconciler"]
