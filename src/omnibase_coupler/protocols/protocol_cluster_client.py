# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Protocol for the control-plane operations the engine consumes.

Every operation is addressed by ``(api_version, kind, name, namespace)``
and works on plain manifest dicts, so the engine manipulates any kind
without typed clients. Implementations:

    - HandlerKubernetesCluster: kubernetes dynamic client (production)
    - InMemoryClusterClient: in-process store used by tests

Error Contract:
    Implementations raise structured errors, never return sentinels:
    - ResourceNotFoundError: the object (or its kind) does not exist
    - ResourceAlreadyExistsError: ``create`` collided with an existing object
    - ResourceConflictError: ``update``/``update_status`` carried a stale
      ``metadata.resourceVersion``
    - InfraConnectionError / InfraTimeoutError: transport failures

Status Subresource:
    ``update`` writes ``metadata`` and ``spec`` and ignores ``status``;
    ``update_status`` writes only ``status``. Both are optimistic-concurrency
    checked against ``metadata.resourceVersion``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Optional, Protocol, runtime_checkable

from omnibase_coupler.models import ModelWatchEvent


@runtime_checkable
class ProtocolClusterClient(Protocol):
    """Kind-agnostic cluster API."""

    async def get(
        self,
        api_version: str,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
    ) -> dict[str, object]:
        """Fetch one object."""
        ...

    async def list(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
    ) -> list[dict[str, object]]:
        """List objects of a kind, optionally scoped to a namespace."""
        ...

    def watch(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
    ) -> AsyncIterator[ModelWatchEvent]:
        """Stream ADDED/MODIFIED/DELETED events until the iterator is closed."""
        ...

    async def create(self, manifest: dict[str, object]) -> dict[str, object]:
        ...

    async def update(self, manifest: dict[str, object]) -> dict[str, object]:
        ...

    async def update_status(self, manifest: dict[str, object]) -> dict[str, object]:
        ...

    async def patch(
        self,
        api_version: str,
        kind: str,
        name: str,
        patch: dict[str, object],
        namespace: Optional[str] = None,
    ) -> dict[str, object]:
        """JSON merge patch."""
        ...

    async def apply(
        self,
        manifest: dict[str, object],
        field_manager: str,
    ) -> dict[str, object]:
        """Server-side apply with forced conflicts; creates when missing."""
        ...

    async def delete(
        self,
        api_version: str,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
    ) -> None:
        ...

    async def is_namespaced(self, api_version: str, kind: str) -> bool:
        """Whether objects of the kind live in a namespace."""
        ...

    def for_service_account(
        self,
        namespace: str,
        name: str,
    ) -> ProtocolClusterClient:
        """A client acting as ``system:serviceaccount:<namespace>:<name>``."""
        ...


__all__ = ["ProtocolClusterClient"]
