# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupling Engine.

Drives a Plug/Socket pair from declaration to a coupled (or failed) state.
One reconcile pass runs per watch notification; passes for the same
object are serialized through the engine's keyed lock, passes for
different objects run concurrently.

Plug pass:
    1. First pass: ``PlugCreated`` and a ``created`` event.
    2. Socket lookup: missing -> ``SocketNotCreated``; not ready or being
       deleted -> ``SocketNotReady``. Both requeue after the pending
       interval; a Plug that was coupled to a vanished Socket is marked
       broken.
    3. Interface resolution and Socket admission (namespace rules, limit).
    4. ``CouplingInProcess``, then both sides' config maps.
    5. Joining: ``coupled`` hooks, ``coupledSocket`` and the Socket's
       ``coupledPlugs`` entry. Already joined: ``updated`` hooks.
    6. Result maps, ``resultResources``, then ``CouplingSucceeded`` with
       the coupled result.

Plug deletion: ``decoupled`` hooks (when coupled), removal from the
Socket, ``deleted`` hooks, finalizer removal.

Socket pass: ``SocketCreated`` and a ``created`` event on the first pass,
Interface resolution, ``ready``, then every coupled Plug is requeued.
Socket deletion: ``deleted`` hooks, coupled Plugs released and requeued,
finalizer removal.

Error Handling:
    Coupling failures mark the Plug ``Failed`` (and the Socket, when its
    own hook failed). Missing dependencies and missing result properties
    requeue after the pending interval. Optimistic-lock conflicts requeue
    immediately. Anything else propagates to the controller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from omnibase_coupler.constants import (
    API_VERSION,
    FINALIZER,
    KIND_INTERFACE,
    KIND_PLUG,
    KIND_SOCKET,
)
from omnibase_coupler.coupler.coupler_handlers import CouplerHandlers
from omnibase_coupler.coupler.coupler_status import CouplerStatusWriter
from omnibase_coupler.enums import (
    EnumConditionType,
    EnumCoupledKind,
    EnumInfraTransportType,
    EnumJoinedReason,
    EnumPhase,
)
from omnibase_coupler.errors import (
    InfraConnectionError,
    InfraTimeoutError,
    InfraUnavailableError,
    InterfaceMismatchError,
    InterfaceValidationError,
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    ResourceConflictError,
    ResourceNotFoundError,
    SocketAdmissionError,
)
from omnibase_coupler.event_bus import (
    CouplingEvent,
    InMemoryEventBus,
    ModelBrokenEvent,
    ModelCoupledEvent,
    ModelCreatedEvent,
    ModelDecoupledEvent,
    ModelDeletedEvent,
    ModelUpdatedEvent,
)
from omnibase_coupler.handlers import HandlerApparatus
from omnibase_coupler.models import (
    ModelCoupledReference,
    ModelCoupledResult,
    ModelCouplerConfig,
    ModelInterface,
    ModelNamespacedName,
    ModelPlug,
    ModelReconcileResult,
    ModelSocket,
)
from omnibase_coupler.protocols import ProtocolClusterClient
from omnibase_coupler.runtime.keyed_lock import KeyedLock
from omnibase_coupler.services import (
    SECTION_RESULT,
    ServiceConfigResolver,
    ServiceResourceApplier,
    ServiceTemplateRenderer,
    ServiceVarResolver,
)
from omnibase_coupler.utils import find_condition, utc_now

logger = logging.getLogger(__name__)

# Failures recorded on the object's status instead of propagating
COUPLING_FAILURES: tuple[type[Exception], ...] = (
    ResourceNotFoundError,
    InterfaceValidationError,
    InterfaceMismatchError,
    SocketAdmissionError,
    ProtocolConfigurationError,
    InfraConnectionError,
    InfraTimeoutError,
)

PlugEnqueuer = Callable[[ModelNamespacedName], None]


def lock_key(kind: str, ref: ModelNamespacedName) -> str:
    return f"{kind.lower()}/{ref.namespace or ''}/{ref.name}"


class CouplerEngine:
    """Coupling state machine for Plugs and Sockets.

    Attributes:
        resolver: Config/Var/Result resolver
        applier: Resource applier shared with the DeferredResource reconciler
        handlers: Lifecycle side effects
        status: Plug/Socket status writer
        locks: Per-object reconcile locks
    """

    def __init__(
        self,
        client: ProtocolClusterClient,
        bus: InMemoryEventBus,
        config: Optional[ModelCouplerConfig] = None,
        apparatus: Optional[HandlerApparatus] = None,
        renderer: Optional[ServiceTemplateRenderer] = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._bus = bus
        self._config = config or ModelCouplerConfig()
        renderer = renderer or ServiceTemplateRenderer()
        self.resolver = ServiceConfigResolver(
            client, ServiceVarResolver(client), renderer, apparatus
        )
        self.applier = ServiceResourceApplier(
            client,
            renderer,
            retry_attempts=self._config.apply_retry_attempts,
            retry_interval_seconds=self._config.apply_retry_interval_seconds,
            sleep=sleep,
        )
        self.handlers = CouplerHandlers(self.applier, apparatus, self.resolver.client_for)
        self.status = CouplerStatusWriter(client, clock)
        self.locks = KeyedLock()
        self._plug_enqueuer: Optional[PlugEnqueuer] = None

    @property
    def config(self) -> ModelCouplerConfig:
        return self._config

    def set_plug_enqueuer(self, enqueuer: Optional[PlugEnqueuer]) -> None:
        """Install the callback that puts a Plug back on its work queue."""
        self._plug_enqueuer = enqueuer

    # =========================================================================
    # Plug
    # =========================================================================

    async def reconcile_plug(self, ref: ModelNamespacedName) -> ModelReconcileResult:
        correlation_id = uuid4()
        start = time.perf_counter()
        try:
            async with self.locks.hold(lock_key(KIND_PLUG, ref)):
                try:
                    plug = ModelPlug.model_validate(
                        await self._client.get(API_VERSION, KIND_PLUG, ref.name, ref.namespace)
                    )
                except ResourceNotFoundError:
                    return ModelReconcileResult.done()

                if plug.is_deleting:
                    return await self._finalize_plug(plug, correlation_id)
                if plug.add_finalizer(FINALIZER):
                    plug = ModelPlug.model_validate(await self._client.update(plug.to_manifest()))
                return await self.couple(plug, correlation_id)
        except ResourceConflictError:
            logger.debug(
                "Plug changed during reconcile, requeueing",
                extra={"plug": str(ref), "correlation_id": str(correlation_id)},
            )
            return ModelReconcileResult.requeue_now()
        finally:
            logger.debug(
                "Plug reconcile finished",
                extra={
                    "plug": str(ref),
                    "correlation_id": str(correlation_id),
                    "duration": time.perf_counter() - start,
                },
            )

    async def couple(
        self,
        plug: ModelPlug,
        correlation_id: Optional[UUID] = None,
    ) -> ModelReconcileResult:
        """Run one coupling pass for ``plug``; the caller holds its lock."""
        correlation_id = correlation_id or uuid4()
        pending = ModelReconcileResult.requeue_in(self._config.pending_requeue_seconds)

        joined = find_condition(plug.status.conditions, EnumConditionType.JOINED.value)
        if joined is None:
            plug = await self.status.update_plug(plug, EnumPhase.PENDING, EnumJoinedReason.PLUG_CREATED)
            self._publish(
                ModelCreatedEvent(kind=EnumCoupledKind.PLUG, plug=plug, correlation_id=correlation_id)
            )

        socket_ref = plug.socket_ref()
        try:
            socket = await self._get_socket(socket_ref)
        except ResourceNotFoundError:
            if plug.status.coupled_socket is not None:
                plug = await self.status.update_plug(
                    plug,
                    EnumPhase.PENDING,
                    EnumJoinedReason.SOCKET_NOT_CREATED,
                    coupled_socket=None,
                )
                self._publish(
                    ModelBrokenEvent(kind=EnumCoupledKind.PLUG, plug=plug, correlation_id=correlation_id)
                )
            else:
                await self.status.update_plug(
                    plug, EnumPhase.PENDING, EnumJoinedReason.SOCKET_NOT_CREATED
                )
            return pending
        if not socket.status.ready or socket.is_deleting:
            await self.status.update_plug(plug, EnumPhase.PENDING, EnumJoinedReason.SOCKET_NOT_READY)
            return pending

        try:
            interface = await self._resolve_interface(plug, socket)
            self._admit(plug, socket)

            coupled_socket = plug.status.coupled_socket
            is_joining = not (
                joined is not None
                and joined.is_true
                and socket.status.has_coupled_plug(plug.uid)
                and coupled_socket is not None
                and coupled_socket.uid == socket.uid
            )
            if coupled_socket is not None and coupled_socket.uid != socket.uid:
                # Re-pointed plug: leave the previous socket first.
                await self._remove_coupled_plug(_reference_name(coupled_socket), plug)
            plug = await self.status.update_plug(
                plug, EnumPhase.PENDING, EnumJoinedReason.COUPLING_IN_PROCESS
            )

            plug_config = await self.resolver.get_config(
                EnumCoupledKind.PLUG, plug, interface, correlation_id
            )
            socket_config = await self.resolver.get_config(
                EnumCoupledKind.SOCKET, socket, interface, correlation_id
            )

            if is_joining:
                plug, socket = await self._join(
                    plug, socket, plug_config, socket_config, correlation_id
                )
            else:
                await self._run_both(
                    self.handlers.updated, plug, socket, plug_config, socket_config, correlation_id
                )
                for kind in (EnumCoupledKind.PLUG, EnumCoupledKind.SOCKET):
                    self._publish(
                        ModelUpdatedEvent(
                            kind=kind,
                            plug=plug,
                            socket=socket,
                            plug_config=plug_config,
                            socket_config=socket_config,
                            correlation_id=correlation_id,
                        )
                    )

            plug_result = await self.resolver.get_result(
                EnumCoupledKind.PLUG, plug, socket, plug_config, socket_config, interface
            )
            socket_result = await self.resolver.get_result(
                EnumCoupledKind.SOCKET, plug, socket, plug_config, socket_config, interface
            )
            await self.handlers.result_resources(
                plug, socket, plug_config, socket_config, plug_result, socket_result, correlation_id
            )

            await self.status.update_plug(
                plug,
                EnumPhase.SUCCEEDED,
                EnumJoinedReason.COUPLING_SUCCEEDED,
                coupled_socket=socket.as_coupled_reference(),
                coupled_result=ModelCoupledResult(
                    plug=plug_result,
                    socket=socket_result,
                    observed_generation=plug.generation,
                ),
            )
        except COUPLING_FAILURES as e:
            logger.warning(
                "Coupling failed",
                extra={
                    "plug": str(plug.namespaced_name),
                    "socket": str(socket_ref),
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "correlation_id": str(correlation_id),
                },
            )
            await self.status.fail_plug(plug, e)
            if isinstance(e, ResourceNotFoundError) or (
                isinstance(e, InterfaceValidationError) and e.section == SECTION_RESULT
            ):
                return pending
            return ModelReconcileResult.done()

        logger.info(
            "Plug coupled",
            extra={
                "plug": str(plug.namespaced_name),
                "socket": str(socket_ref),
                "joined": is_joining,
                "correlation_id": str(correlation_id),
            },
        )
        return ModelReconcileResult.done()

    async def decouple(
        self,
        plug: ModelPlug,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Undo the coupling of a deleting Plug and release its finalizer.

        The finalizer is removed only after every hook returned; a failing
        hook leaves the Plug in place for the next pass.
        """
        correlation_id = correlation_id or uuid4()
        socket_ref = _coupled_socket_ref(plug)
        socket: Optional[ModelSocket]
        try:
            socket = await self._get_socket(socket_ref)
        except ResourceNotFoundError:
            socket = None

        was_coupled = plug.status.coupled_socket is not None or (
            socket is not None and socket.status.has_coupled_plug(plug.uid)
        )
        if was_coupled:
            plug_config: Optional[dict[str, str]] = None
            socket_config: Optional[dict[str, str]] = None
            if plug.spec.apparatus_endpoint:
                plug_config = await self.resolver.get_config(
                    EnumCoupledKind.PLUG, plug, None, correlation_id
                )
            if socket is not None and socket.spec.apparatus_endpoint:
                socket_config = await self.resolver.get_config(
                    EnumCoupledKind.SOCKET, socket, None, correlation_id
                )

            await self.handlers.decoupled(
                EnumCoupledKind.PLUG, plug, socket, plug_config, socket_config, correlation_id
            )
            if socket is not None:
                await self.handlers.decoupled(
                    EnumCoupledKind.SOCKET, plug, socket, plug_config, socket_config, correlation_id
                )
            for kind in (EnumCoupledKind.PLUG, EnumCoupledKind.SOCKET):
                if kind is EnumCoupledKind.SOCKET and socket is None:
                    continue
                self._publish(
                    ModelDecoupledEvent(
                        kind=kind,
                        plug=plug,
                        socket=socket,
                        plug_config=plug_config,
                        socket_config=socket_config,
                        correlation_id=correlation_id,
                    )
                )
            if socket is not None:
                await self._remove_coupled_plug(socket_ref, plug)

        await self.handlers.deleted(EnumCoupledKind.PLUG, plug, correlation_id)
        self._publish(
            ModelDeletedEvent(kind=EnumCoupledKind.PLUG, plug=plug, correlation_id=correlation_id)
        )

        plug.remove_finalizer(FINALIZER)
        await self._client.update(plug.to_manifest())
        logger.info(
            "Plug decoupled",
            extra={
                "plug": str(plug.namespaced_name),
                "socket": str(socket_ref),
                "was_coupled": was_coupled,
                "correlation_id": str(correlation_id),
            },
        )

    async def _finalize_plug(
        self,
        plug: ModelPlug,
        correlation_id: UUID,
    ) -> ModelReconcileResult:
        if not plug.has_finalizer(FINALIZER):
            return ModelReconcileResult.done()
        try:
            await self.decouple(plug, correlation_id)
        except COUPLING_FAILURES as e:
            logger.warning(
                "Decoupling failed",
                extra={
                    "plug": str(plug.namespaced_name),
                    "error": str(e),
                    "correlation_id": str(correlation_id),
                },
            )
            await self.status.fail_plug(plug, e)
            return ModelReconcileResult.requeue_in(self._config.pending_requeue_seconds)
        return ModelReconcileResult.done()

    async def _join(
        self,
        plug: ModelPlug,
        socket: ModelSocket,
        plug_config: dict[str, str],
        socket_config: dict[str, str],
        correlation_id: UUID,
    ) -> tuple[ModelPlug, ModelSocket]:
        socket = await self._claim_slot(socket.namespaced_name, plug)
        await self._run_both(
            self.handlers.coupled,
            plug,
            socket,
            plug_config,
            socket_config,
            correlation_id,
            claimed=True,
        )
        plug = await self.status.update_plug(
            plug,
            EnumPhase.PENDING,
            EnumJoinedReason.COUPLING_IN_PROCESS,
            coupled_socket=socket.as_coupled_reference(),
        )
        for kind in (EnumCoupledKind.PLUG, EnumCoupledKind.SOCKET):
            self._publish(
                ModelCoupledEvent(
                    kind=kind,
                    plug=plug,
                    socket=socket,
                    plug_config=plug_config,
                    socket_config=socket_config,
                    correlation_id=correlation_id,
                )
            )
        return plug, socket

    async def _run_both(
        self,
        hook: Callable[..., object],
        plug: ModelPlug,
        socket: ModelSocket,
        plug_config: dict[str, str],
        socket_config: dict[str, str],
        correlation_id: UUID,
        claimed: bool = False,
    ) -> None:
        """Run ``hook`` for the plug side, then the socket side.

        A socket-side failure also marks the Socket Failed before the error
        propagates to the Plug's pass. With ``claimed`` the Plug's entry in
        the Socket's coupled list is released on either failure.
        """
        try:
            await hook(EnumCoupledKind.PLUG, plug, socket, plug_config, socket_config, correlation_id)  # type: ignore[misc]
        except COUPLING_FAILURES:
            if claimed:
                await self._remove_coupled_plug(socket.namespaced_name, plug)
            raise
        try:
            await hook(EnumCoupledKind.SOCKET, plug, socket, plug_config, socket_config, correlation_id)  # type: ignore[misc]
        except COUPLING_FAILURES as e:
            await self._fail_socket(socket.namespaced_name, e, release=plug if claimed else None)
            raise

    async def _fail_socket(
        self,
        ref: ModelNamespacedName,
        error: Exception,
        release: Optional[ModelPlug] = None,
    ) -> None:
        async with self.locks.hold(lock_key(KIND_SOCKET, ref)):
            try:
                socket = await self._get_socket(ref)
                if release is not None:
                    socket.remove_coupled_plug(release.uid)
                await self.status.fail_socket(socket, error)
            except (ResourceNotFoundError, ResourceConflictError) as e:
                logger.warning(
                    "Could not mark socket failed",
                    extra={"socket": str(ref), "error": str(e)},
                )

    async def _claim_slot(
        self,
        ref: ModelNamespacedName,
        plug: ModelPlug,
    ) -> ModelSocket:
        """Add ``plug`` to the Socket's coupled list, re-admitting it first.

        Admission is repeated on a fresh read under the Socket's lock so
        concurrent joins cannot exceed the Socket's limit.

        Raises:
            SocketAdmissionError: The Socket refuses ``plug`` on the fresh read
        """
        async with self.locks.hold(lock_key(KIND_SOCKET, ref)):
            socket = await self._get_socket(ref)
            self._admit(plug, socket)
            socket.add_coupled_plug(plug.as_coupled_reference())
            return await self.status.refresh_socket_coupled(socket)

    async def _remove_coupled_plug(
        self,
        ref: ModelNamespacedName,
        plug: ModelPlug,
    ) -> None:
        async with self.locks.hold(lock_key(KIND_SOCKET, ref)):
            try:
                socket = await self._get_socket(ref)
            except ResourceNotFoundError:
                return
            if socket.remove_coupled_plug(plug.uid):
                await self.status.refresh_socket_coupled(socket)

    async def _resolve_interface(
        self,
        plug: ModelPlug,
        socket: ModelSocket,
    ) -> Optional[ModelInterface]:
        """Interface shared by both sides; the Plug's defaults to the Socket's.

        Raises:
            InterfaceMismatchError: The sides reference different Interfaces
            ResourceNotFoundError: A referenced Interface does not exist
        """
        socket_interface: Optional[ModelInterface] = None
        if socket.spec.interface is not None:
            socket_interface = await self._get_interface(socket.spec.interface)
        if plug.spec.interface is None:
            return socket_interface
        plug_interface = await self._get_interface(plug.spec.interface)
        if socket_interface is not None and plug_interface.uid != socket_interface.uid:
            raise InterfaceMismatchError(
                "plug and socket interface do not match",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="resolve_interface",
                    target_name=str(plug.namespaced_name),
                ),
                plug_interface=str(plug.spec.interface),
                socket_interface=str(socket.spec.interface),
            )
        return plug_interface

    def _admit(self, plug: ModelPlug, socket: ModelSocket) -> None:
        """Raises SocketAdmissionError when the Socket refuses ``plug``."""
        namespace = plug.namespace or ""
        context = ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.RUNTIME,
            operation="admit_plug",
            target_name=str(socket.namespaced_name),
        )
        validation = socket.spec.validation
        if validation is not None:
            if validation.namespace_whitelist and namespace not in validation.namespace_whitelist:
                raise SocketAdmissionError(
                    f"namespace {namespace} is not whitelisted by socket {socket.namespaced_name}",
                    context=context,
                )
            if namespace in validation.namespace_blacklist:
                raise SocketAdmissionError(
                    f"namespace {namespace} is blacklisted by socket {socket.namespaced_name}",
                    context=context,
                )
        limit = socket.spec.limit
        if limit:
            others = [p for p in socket.status.coupled_plugs if p.uid != plug.uid]
            if len(others) >= limit:
                raise SocketAdmissionError(
                    f"socket {socket.namespaced_name} is limited to {limit} coupled plugs",
                    context=context,
                    limit=limit,
                )

    # =========================================================================
    # Socket
    # =========================================================================

    async def reconcile_socket(self, ref: ModelNamespacedName) -> ModelReconcileResult:
        correlation_id = uuid4()
        try:
            async with self.locks.hold(lock_key(KIND_SOCKET, ref)):
                try:
                    socket = await self._get_socket(ref)
                except ResourceNotFoundError:
                    return ModelReconcileResult.done()
                if socket.is_deleting:
                    await self._finalize_socket(socket, correlation_id)
                    return ModelReconcileResult.done()
                if socket.add_finalizer(FINALIZER):
                    socket = ModelSocket.model_validate(
                        await self._client.update(socket.to_manifest())
                    )
                return await self._prepare_socket(socket, correlation_id)
        except ResourceConflictError:
            logger.debug(
                "Socket changed during reconcile, requeueing",
                extra={"socket": str(ref), "correlation_id": str(correlation_id)},
            )
            return ModelReconcileResult.requeue_now()

    async def _prepare_socket(
        self,
        socket: ModelSocket,
        correlation_id: UUID,
    ) -> ModelReconcileResult:
        if find_condition(socket.status.conditions, EnumConditionType.JOINED.value) is None:
            socket = await self.status.update_socket(
                socket, EnumPhase.PENDING, EnumJoinedReason.SOCKET_CREATED, ready=False
            )
            self._publish(
                ModelCreatedEvent(
                    kind=EnumCoupledKind.SOCKET, socket=socket, correlation_id=correlation_id
                )
            )

        try:
            if socket.spec.interface is None:
                raise ProtocolConfigurationError(
                    f"socket {socket.namespaced_name} does not reference an interface",
                    context=ModelInfraErrorContext(
                        transport_type=EnumInfraTransportType.RUNTIME,
                        operation="resolve_interface",
                        target_name=str(socket.namespaced_name),
                    ),
                )
            await self._get_interface(socket.spec.interface)
        except (ResourceNotFoundError, ProtocolConfigurationError) as e:
            logger.warning(
                "Socket interface unavailable",
                extra={
                    "socket": str(socket.namespaced_name),
                    "error": str(e),
                    "correlation_id": str(correlation_id),
                },
            )
            await self.status.fail_socket(socket, e, ready=False)
            return ModelReconcileResult.done()

        reason = (
            EnumJoinedReason.SOCKET_COUPLED
            if socket.status.coupled_plugs
            else EnumJoinedReason.SOCKET_READY
        )
        socket = await self.status.update_socket(socket, EnumPhase.READY, reason, ready=True)
        for entry in socket.status.coupled_plugs:
            self._enqueue_plug(_reference_name(entry))
        return ModelReconcileResult.done()

    async def _finalize_socket(self, socket: ModelSocket, correlation_id: UUID) -> None:
        if not socket.has_finalizer(FINALIZER):
            return
        await self.handlers.deleted(EnumCoupledKind.SOCKET, socket, correlation_id)
        self._publish(
            ModelDeletedEvent(kind=EnumCoupledKind.SOCKET, socket=socket, correlation_id=correlation_id)
        )
        for entry in socket.status.coupled_plugs:
            await self._release_plug(entry, socket, correlation_id)

        socket.remove_finalizer(FINALIZER)
        await self._client.update(socket.to_manifest())
        logger.info(
            "Socket finalized",
            extra={
                "socket": str(socket.namespaced_name),
                "released_plugs": len(socket.status.coupled_plugs),
                "correlation_id": str(correlation_id),
            },
        )

    async def _release_plug(
        self,
        entry: ModelCoupledReference,
        socket: ModelSocket,
        correlation_id: UUID,
    ) -> None:
        """Clear a Plug's ``coupledSocket`` for a Socket going away.

        A Plug updated concurrently is left to its own pass, which sees the
        Socket missing and clears the reference itself.
        """
        ref = _reference_name(entry)
        try:
            plug = ModelPlug.model_validate(
                await self._client.get(API_VERSION, KIND_PLUG, ref.name, ref.namespace)
            )
            coupled_socket = plug.status.coupled_socket
            if coupled_socket is not None and coupled_socket.uid == socket.uid:
                plug = await self.status.update_plug(
                    plug,
                    EnumPhase.PENDING,
                    EnumJoinedReason.SOCKET_NOT_READY,
                    coupled_socket=None,
                )
                self._publish(
                    ModelBrokenEvent(
                        kind=EnumCoupledKind.PLUG,
                        plug=plug,
                        socket=socket,
                        correlation_id=correlation_id,
                    )
                )
        except ResourceNotFoundError:
            return
        except ResourceConflictError:
            logger.debug("Plug busy, leaving release to its own pass", extra={"plug": str(ref)})
        self._enqueue_plug(ref)

    # =========================================================================
    # Shared
    # =========================================================================

    async def _get_socket(self, ref: ModelNamespacedName) -> ModelSocket:
        return ModelSocket.model_validate(
            await self._client.get(API_VERSION, KIND_SOCKET, ref.name, ref.namespace)
        )

    async def _get_interface(self, ref: ModelNamespacedName) -> ModelInterface:
        ref = ref.with_default_namespace(self._config.pod_namespace)
        return ModelInterface.model_validate(
            await self._client.get(API_VERSION, KIND_INTERFACE, ref.name, ref.namespace)
        )

    def _enqueue_plug(self, ref: ModelNamespacedName) -> None:
        if self._plug_enqueuer is not None:
            self._plug_enqueuer(ref)

    def _publish(self, event: CouplingEvent) -> None:
        try:
            self._bus.publish(event)
        except InfraUnavailableError:
            logger.warning(
                "Event bus unavailable, event dropped",
                extra={"topic": event.topic.value, "correlation_id": str(event.correlation_id)},
            )


def _coupled_socket_ref(plug: ModelPlug) -> ModelNamespacedName:
    coupled = plug.status.coupled_socket
    if coupled is not None:
        return ModelNamespacedName(name=coupled.name, namespace=coupled.namespace)
    return plug.socket_ref()


def _reference_name(entry: ModelCoupledReference) -> ModelNamespacedName:
    return ModelNamespacedName(name=entry.name, namespace=entry.namespace)


__all__ = ["COUPLING_FAILURES", "CouplerEngine", "lock_key"]
