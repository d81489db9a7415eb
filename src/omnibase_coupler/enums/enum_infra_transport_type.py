# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Transport Type Enumeration.

Defines the transport types the coupler talks through.
Used for error context and transport identification.
"""

from enum import Enum


class EnumInfraTransportType(str, Enum):
    """Transport types for coupler infrastructure components.

    Attributes:
        HTTP: Apparatus webhook transport
        KUBERNETES: Cluster API server transport
        RUNTIME: Runtime internal transport (event bus, work queues)
    """

    HTTP = "http"
    KUBERNETES = "kubernetes"
    RUNTIME = "runtime"


__all__ = ["EnumInfraTransportType"]
