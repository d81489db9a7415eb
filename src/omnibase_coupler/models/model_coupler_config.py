# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupler Runtime Configuration Model.

Values come from an optional YAML file and are overridden by environment
variables; see ``omnibase_coupler.runtime.kernel.load_config``.

Environment Variables:
    MAX_CONCURRENT_RECONCILES: Reconcile workers per controller (default 3)
    POD_NAMESPACE: Namespace used when a reference omits one (default kube-system)
    WATCH_NAMESPACE: Restrict watches to one namespace (default: all)
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_POD_NAMESPACE = "kube-system"


class ModelCouplerConfig(BaseModel):
    """Runtime configuration for the coupling engine.

    Attributes:
        max_concurrent_reconciles: Worker count per controller
        pod_namespace: Operator namespace; default for Interface references
        watch_namespace: Single namespace to watch, or None for all
        bus_max_queue_size: Capacity of each subscriber queue
        bus_max_workers: Lifecycle handler workers consuming the bus
        bus_delivery_timeout_seconds: Bounded wait on a full queue; None blocks
        pending_requeue_seconds: Requeue interval for pending states
        apparatus_timeout_seconds: HTTP timeout for apparatus calls
        apply_retry_attempts: Attempts when reading back an applied object
        apply_retry_interval_seconds: Delay between those attempts
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_concurrent_reconciles: int = Field(default=3, ge=1, le=64)
    pod_namespace: str = Field(default=DEFAULT_POD_NAMESPACE, min_length=1)
    watch_namespace: Optional[str] = Field(default=None)
    bus_max_queue_size: int = Field(default=100, ge=1)
    bus_max_workers: int = Field(default=1, ge=1)
    bus_delivery_timeout_seconds: Optional[float] = Field(default=30.0, gt=0)
    pending_requeue_seconds: float = Field(default=5.0, ge=0)
    apparatus_timeout_seconds: float = Field(default=30.0, gt=0)
    apply_retry_attempts: int = Field(default=5, ge=1)
    apply_retry_interval_seconds: float = Field(default=2.0, ge=0)


__all__ = ["DEFAULT_POD_NAMESPACE", "ModelCouplerConfig"]
