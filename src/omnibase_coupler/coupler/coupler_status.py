# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Status writers for Plugs and Sockets.

Every status write goes through the status subresource and is checked
against ``metadata.resourceVersion``; a stale object surfaces as
ResourceConflictError and the caller requeues.

Condition Layout:
    - ``Joined`` always reflects the latest coupling step. It is ``True``
      only on a coupled Plug (``CouplingSucceeded``) and on a Socket with at
      least one coupled Plug (``SocketCoupled``).
    - ``Failed`` is present only after an error. Any later non-error write
      clears it, so a recovered object shows no stale failure.
    - Writes that change nothing are skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from omnibase_coupler.enums import (
    EnumConditionStatus,
    EnumConditionType,
    EnumJoinedReason,
    EnumPhase,
)
from omnibase_coupler.models import (
    ModelCondition,
    ModelCoupledReference,
    ModelCoupledResult,
    ModelPlug,
    ModelSocket,
)
from omnibase_coupler.protocols import ProtocolClusterClient
from omnibase_coupler.utils import build_condition, set_condition, utc_now

logger = logging.getLogger(__name__)

# Sentinel for "leave the field as it is"
_UNSET: object = object()


def socket_coupled_message(count: int) -> str:
    if count == 1:
        return "1 plug coupled"
    return f"{count} plugs coupled"


def _apply_joined(
    conditions: list[ModelCondition],
    reason: EnumJoinedReason,
    message: str,
    joined: bool,
    generation: int,
    now: datetime,
) -> list[ModelCondition]:
    """Return the condition list after a Joined write.

    Non-error writes keep only the Joined condition; error writes keep the
    list and add ``Failed``.
    """
    status = EnumConditionStatus.TRUE if joined else EnumConditionStatus.FALSE
    if reason is EnumJoinedReason.ERROR:
        updated = list(conditions)
        set_condition(
            updated,
            build_condition(
                EnumConditionType.JOINED.value, status, reason.value, message, generation
            ),
            generation,
            now,
        )
        set_condition(
            updated,
            build_condition(
                EnumConditionType.FAILED.value,
                EnumConditionStatus.TRUE,
                reason.value,
                message,
                generation,
            ),
            generation,
            now,
        )
        return updated
    updated = [c for c in conditions if c.type == EnumConditionType.JOINED.value]
    set_condition(
        updated,
        build_condition(
            EnumConditionType.JOINED.value, status, reason.value, message, generation
        ),
        generation,
        now,
    )
    return updated


class CouplerStatusWriter:
    """Writes Plug and Socket status through a cluster client."""

    def __init__(
        self,
        client: ProtocolClusterClient,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._clock = clock

    async def update_plug(
        self,
        plug: ModelPlug,
        phase: EnumPhase,
        reason: EnumJoinedReason,
        message: Optional[str] = None,
        coupled_socket: object = _UNSET,
        coupled_result: object = _UNSET,
    ) -> ModelPlug:
        """Write phase, the Joined condition and optional coupling fields.

        ``coupled_socket``/``coupled_result`` are left untouched unless
        passed; pass ``None`` to clear them.
        """
        text = message or reason.default_message
        before = plug.status.model_copy(deep=True)
        status = plug.status
        status.conditions = _apply_joined(
            status.conditions,
            reason,
            text,
            reason is EnumJoinedReason.COUPLING_SUCCEEDED,
            plug.generation,
            self._clock(),
        )
        status.phase = phase
        status.message = text if reason is EnumJoinedReason.ERROR else None
        if coupled_socket is not _UNSET:
            assert coupled_socket is None or isinstance(coupled_socket, ModelCoupledReference)
            status.coupled_socket = coupled_socket
        if coupled_result is not _UNSET:
            assert coupled_result is None or isinstance(coupled_result, ModelCoupledResult)
            status.coupled_result = coupled_result
        if status == before:
            return plug

        logger.debug(
            "Writing plug status",
            extra={
                "namespace": plug.namespace,
                "name": plug.name,
                "phase": phase.value,
                "reason": reason.value,
            },
        )
        updated = await self._client.update_status(plug.to_manifest())
        return ModelPlug.model_validate(updated)

    async def fail_plug(self, plug: ModelPlug, error: Exception) -> ModelPlug:
        return await self.update_plug(
            plug, EnumPhase.FAILED, EnumJoinedReason.ERROR, str(error) or type(error).__name__
        )

    async def update_socket(
        self,
        socket: ModelSocket,
        phase: EnumPhase,
        reason: EnumJoinedReason,
        message: Optional[str] = None,
        ready: Optional[bool] = None,
    ) -> ModelSocket:
        """Write phase, readiness and the Joined condition.

        ``SocketCoupled`` is rewritten as ``SocketEmpty`` when no Plug is
        coupled, and its message carries the coupled Plug count.
        """
        count = len(socket.status.coupled_plugs)
        if reason is EnumJoinedReason.SOCKET_COUPLED and count == 0:
            reason = EnumJoinedReason.SOCKET_EMPTY
        if reason is EnumJoinedReason.SOCKET_COUPLED:
            text = message or socket_coupled_message(count)
        else:
            text = message or reason.default_message

        before = socket.status.model_copy(deep=True)
        status = socket.status
        status.conditions = _apply_joined(
            status.conditions,
            reason,
            text,
            reason is EnumJoinedReason.SOCKET_COUPLED,
            socket.generation,
            self._clock(),
        )
        status.phase = phase
        status.message = text if reason is EnumJoinedReason.ERROR else None
        if ready is not None:
            status.ready = ready
        if status == before:
            return socket

        logger.debug(
            "Writing socket status",
            extra={
                "namespace": socket.namespace,
                "name": socket.name,
                "phase": phase.value,
                "reason": reason.value,
                "coupled_plugs": count,
            },
        )
        updated = await self._client.update_status(socket.to_manifest())
        return ModelSocket.model_validate(updated)

    async def refresh_socket_coupled(self, socket: ModelSocket) -> ModelSocket:
        """Recompute the coupled-plug count condition after membership changed."""
        phase = socket.status.phase or EnumPhase.READY
        if phase is EnumPhase.FAILED:
            phase = EnumPhase.READY
        return await self.update_socket(socket, phase, EnumJoinedReason.SOCKET_COUPLED)

    async def fail_socket(
        self,
        socket: ModelSocket,
        error: Exception,
        ready: Optional[bool] = None,
    ) -> ModelSocket:
        return await self.update_socket(
            socket,
            EnumPhase.FAILED,
            EnumJoinedReason.ERROR,
            str(error) or type(error).__name__,
            ready=ready,
        )


__all__ = ["CouplerStatusWriter", "socket_coupled_message"]
