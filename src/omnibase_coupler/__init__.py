# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupler - Plug/Socket coupling engine for Kubernetes.

A Plug (consumer) declares which Socket (provider) it wants to join. The
engine resolves both sides' configuration against a shared Interface,
applies templated resources, runs lifecycle hooks and apparatus webhooks,
and records the outcome in status conditions.

Key Components:
    - CouplerEngine: couple/decouple algorithm for Plugs and Sockets
    - Controller: watch-driven reconcile loop for one kind
    - InMemoryEventBus: fan-out of lifecycle events to handler workers
    - HandlerKubernetesCluster / HandlerApparatus: external transports
    - Kernel: ``omnibase-coupler`` entrypoint
"""

__all__: list[str] = []
