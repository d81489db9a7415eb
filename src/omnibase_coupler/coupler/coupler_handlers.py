# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Lifecycle side effects of a coupling.

Each hook notifies the owner's apparatus (``<endpoint>/<event>``) when one
is configured, then applies the owner's resources attached to that hook.
The apparatus call goes first; a failure there skips the resources.

Hook to resource mapping:
    created   -> resources with ``when: created``
    coupled   -> ``when: coupled``
    updated   -> ``when: changed`` (``updated`` is a synonym)
    decoupled -> ``when: decoupled`` (``retainWhenDecoupled`` applies skipped)
    deleted   -> ``when: deleted``
    broken    -> apparatus notification only
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional
from uuid import UUID

from omnibase_coupler.enums import EnumCoupledKind, EnumCouplingTopic, EnumWhen
from omnibase_coupler.event_bus import (
    CouplingEvent,
    ModelBrokenEvent,
    ModelCoupledEvent,
    ModelCreatedEvent,
    ModelDecoupledEvent,
    ModelDeletedEvent,
    ModelUpdatedEvent,
)
from omnibase_coupler.handlers import HandlerApparatus
from omnibase_coupler.models import CouplingObject, ModelPlug, ModelSocket
from omnibase_coupler.protocols import ProtocolClusterClient
from omnibase_coupler.services import ServiceResourceApplier, build_resource_context

logger = logging.getLogger(__name__)

_HOOKS: dict[EnumCouplingTopic, EnumWhen] = {
    EnumCouplingTopic.CREATED: EnumWhen.CREATED,
    EnumCouplingTopic.COUPLED: EnumWhen.COUPLED,
    EnumCouplingTopic.UPDATED: EnumWhen.CHANGED,
    EnumCouplingTopic.DECOUPLED: EnumWhen.DECOUPLED,
    EnumCouplingTopic.DELETED: EnumWhen.DELETED,
}


class CouplerHandlers:
    """Runs apparatus notifications and lifecycle resources for one side."""

    def __init__(
        self,
        applier: ServiceResourceApplier,
        apparatus: Optional[HandlerApparatus],
        client_for: Callable[[CouplingObject], ProtocolClusterClient],
    ) -> None:
        self._applier = applier
        self._apparatus = apparatus
        self._client_for = client_for

    async def created(
        self,
        kind: EnumCoupledKind,
        owner: CouplingObject,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        plug, socket = _split(kind, owner)
        await self._run(EnumCouplingTopic.CREATED, kind, plug, socket, correlation_id=correlation_id)

    async def coupled(
        self,
        kind: EnumCoupledKind,
        plug: ModelPlug,
        socket: ModelSocket,
        plug_config: dict[str, str],
        socket_config: dict[str, str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self._run(
            EnumCouplingTopic.COUPLED, kind, plug, socket, plug_config, socket_config, correlation_id
        )

    async def updated(
        self,
        kind: EnumCoupledKind,
        plug: ModelPlug,
        socket: ModelSocket,
        plug_config: dict[str, str],
        socket_config: dict[str, str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self._run(
            EnumCouplingTopic.UPDATED, kind, plug, socket, plug_config, socket_config, correlation_id
        )

    async def decoupled(
        self,
        kind: EnumCoupledKind,
        plug: ModelPlug,
        socket: Optional[ModelSocket],
        plug_config: Optional[dict[str, str]] = None,
        socket_config: Optional[dict[str, str]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self._run(
            EnumCouplingTopic.DECOUPLED, kind, plug, socket, plug_config, socket_config, correlation_id
        )

    async def deleted(
        self,
        kind: EnumCoupledKind,
        owner: CouplingObject,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        plug, socket = _split(kind, owner)
        await self._run(EnumCouplingTopic.DELETED, kind, plug, socket, correlation_id=correlation_id)

    async def broken(
        self,
        kind: EnumCoupledKind,
        owner: CouplingObject,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        plug, socket = _split(kind, owner)
        await self._run(EnumCouplingTopic.BROKEN, kind, plug, socket, correlation_id=correlation_id)

    async def result_resources(
        self,
        plug: ModelPlug,
        socket: ModelSocket,
        plug_config: dict[str, str],
        socket_config: dict[str, str],
        plug_result: dict[str, str],
        socket_result: dict[str, str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Apply both sides' ``resultResources`` once results are known."""
        context = build_resource_context(
            plug.to_template_context(),
            socket.to_template_context(),
            plug_config,
            socket_config,
            plug_result,
            socket_result,
        )
        for owner in (plug, socket):
            actions = owner.spec.result_resources
            if actions:
                await self._applier.process_resources(
                    list(actions),
                    context,
                    owner.namespace,
                    self._client_for(owner),
                    correlation_id,
                )

    async def handle_event(self, event: CouplingEvent) -> None:
        """Run the hook matching a bus event."""
        owner = event.owner
        if owner is None:
            logger.warning(
                "Event without owner ignored",
                extra={"topic": event.topic.value, "correlation_id": str(event.correlation_id)},
            )
            return
        if isinstance(event, ModelCreatedEvent):
            await self.created(event.kind, owner, event.correlation_id)  # type: ignore[arg-type]
        elif isinstance(event, ModelBrokenEvent):
            await self.broken(event.kind, owner, event.correlation_id)  # type: ignore[arg-type]
        elif isinstance(event, ModelDeletedEvent):
            await self.deleted(event.kind, owner, event.correlation_id)  # type: ignore[arg-type]
        elif isinstance(event, ModelDecoupledEvent):
            assert event.plug is not None
            await self.decoupled(
                event.kind,
                event.plug,
                event.socket,
                event.plug_config,
                event.socket_config,
                event.correlation_id,
            )
        elif isinstance(event, (ModelCoupledEvent, ModelUpdatedEvent)):
            assert event.plug is not None and event.socket is not None
            hook = self.coupled if isinstance(event, ModelCoupledEvent) else self.updated
            await hook(
                event.kind,
                event.plug,
                event.socket,
                event.plug_config,
                event.socket_config,
                event.correlation_id,
            )

    async def _run(
        self,
        topic: EnumCouplingTopic,
        kind: EnumCoupledKind,
        plug: Optional[ModelPlug],
        socket: Optional[ModelSocket],
        plug_config: Optional[dict[str, str]] = None,
        socket_config: Optional[dict[str, str]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        owner: Optional[CouplingObject] = plug if kind is EnumCoupledKind.PLUG else socket
        if owner is None:
            return
        logger.info(
            "Running lifecycle hook",
            extra={
                "topic": topic.value,
                "kind": kind.value,
                "namespace": owner.namespace,
                "name": owner.name,
                "correlation_id": str(correlation_id) if correlation_id else None,
            },
        )

        endpoint = owner.spec.apparatus_endpoint
        if endpoint and self._apparatus is not None:
            await self._apparatus.post_event(
                endpoint,
                topic,
                plug=plug,
                socket=socket,
                plug_config=plug_config,
                socket_config=socket_config,
                correlation_id=correlation_id,
            )

        when = _HOOKS.get(topic)
        if when is None:
            return
        resources = self._applier.get_resources(list(owner.spec.resources), when)
        if not resources:
            return
        context = build_resource_context(
            plug.to_template_context() if plug is not None else None,
            socket.to_template_context() if socket is not None else None,
            plug_config,
            socket_config,
        )
        await self._applier.process_resources(
            list(resources),
            context,
            owner.namespace,
            self._client_for(owner),
            correlation_id,
        )


def _split(
    kind: EnumCoupledKind,
    owner: CouplingObject,
) -> tuple[Optional[ModelPlug], Optional[ModelSocket]]:
    if kind is EnumCoupledKind.PLUG:
        assert isinstance(owner, ModelPlug)
        return owner, None
    assert isinstance(owner, ModelSocket)
    return None, owner


__all__ = ["CouplerHandlers"]
