# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Test doubles shipped with the package."""

from omnibase_coupler.testing.inmemory_cluster_client import (
    CLUSTER_SCOPED_KINDS,
    InMemoryClusterClient,
)

__all__: list[str] = ["CLUSTER_SCOPED_KINDS", "InMemoryClusterClient"]
