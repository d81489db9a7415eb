# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for CouplerStatusWriter condition and phase writes."""

from __future__ import annotations

import pytest

from omnibase_coupler.coupler import CouplerStatusWriter
from omnibase_coupler.coupler.coupler_status import socket_coupled_message
from omnibase_coupler.enums import EnumJoinedReason, EnumPhase
from omnibase_coupler.errors import ResourceConflictError
from omnibase_coupler.models import ModelCoupledReference, ModelPlug, ModelSocket
from omnibase_coupler.testing import InMemoryClusterClient
from tests.helpers.coupling_builders import condition, plug_manifest, seed, socket_manifest
from tests.helpers.deterministic import DeterministicClock


def _plug_ref(index: int) -> ModelCoupledReference:
    return ModelCoupledReference(
        api_version="integration.rock8s.com/v1beta1",
        kind="Plug",
        name=f"app-{index}",
        namespace="default",
        uid=f"uid-{index}",
    )


class TestPlugStatus:
    """Plug phase, Joined and Failed handling."""

    @pytest.fixture
    def writer(
        self, cluster: InMemoryClusterClient, clock: DeterministicClock
    ) -> CouplerStatusWriter:
        return CouplerStatusWriter(cluster, clock)

    @pytest.mark.asyncio
    async def test_update_plug_writes_joined(
        self, cluster: InMemoryClusterClient, writer: CouplerStatusWriter
    ) -> None:
        """A non-error write sets the phase and Joined with the default message."""
        [stored] = await seed(cluster, plug_manifest())
        plug = ModelPlug.model_validate(stored)

        updated = await writer.update_plug(
            plug, EnumPhase.PENDING, EnumJoinedReason.SOCKET_NOT_CREATED
        )

        assert updated.status.phase is EnumPhase.PENDING
        assert updated.status.message is None
        persisted = await cluster.get(plug.api_version, "Plug", "app", "default")
        joined = condition(persisted, "Joined")
        assert joined is not None
        assert joined["status"] == "False"
        assert joined["reason"] == "SocketNotCreated"
        assert joined["message"] == "waiting for socket to be created"
        assert condition(persisted, "Failed") is None

    @pytest.mark.asyncio
    async def test_fail_plug_adds_failed_condition(
        self, cluster: InMemoryClusterClient, writer: CouplerStatusWriter
    ) -> None:
        """Errors set phase Failed, the message and a Failed condition."""
        [stored] = await seed(cluster, plug_manifest())
        plug = ModelPlug.model_validate(stored)

        updated = await writer.fail_plug(plug, RuntimeError("apparatus unreachable"))

        assert updated.status.phase is EnumPhase.FAILED
        assert updated.status.message == "apparatus unreachable"
        persisted = await cluster.get(plug.api_version, "Plug", "app", "default")
        assert condition(persisted, "Joined")["reason"] == "Error"  # type: ignore[index]
        failed = condition(persisted, "Failed")
        assert failed is not None
        assert failed["status"] == "True"

    @pytest.mark.asyncio
    async def test_recovery_clears_failed(
        self, cluster: InMemoryClusterClient, writer: CouplerStatusWriter
    ) -> None:
        """A later non-error write removes the stale Failed condition."""
        [stored] = await seed(cluster, plug_manifest())
        plug = await writer.fail_plug(ModelPlug.model_validate(stored), RuntimeError("boom"))

        recovered = await writer.update_plug(
            plug, EnumPhase.SUCCEEDED, EnumJoinedReason.COUPLING_SUCCEEDED
        )

        assert [c.type for c in recovered.status.conditions] == ["Joined"]
        assert recovered.status.conditions[0].is_true
        assert recovered.status.message is None

    @pytest.mark.asyncio
    async def test_error_without_message_uses_type_name(
        self, cluster: InMemoryClusterClient, writer: CouplerStatusWriter
    ) -> None:
        [stored] = await seed(cluster, plug_manifest())
        updated = await writer.fail_plug(ModelPlug.model_validate(stored), KeyError())
        assert updated.status.message == "KeyError"

    @pytest.mark.asyncio
    async def test_unchanged_write_is_skipped(
        self, cluster: InMemoryClusterClient, writer: CouplerStatusWriter
    ) -> None:
        """Writing the same status twice reaches the store once."""
        [stored] = await seed(cluster, plug_manifest())
        plug = await writer.update_plug(
            ModelPlug.model_validate(stored), EnumPhase.PENDING, EnumJoinedReason.PLUG_CREATED
        )

        again = await writer.update_plug(plug, EnumPhase.PENDING, EnumJoinedReason.PLUG_CREATED)

        assert again is plug
        assert cluster.count("update_status", "Plug") == 1

    @pytest.mark.asyncio
    async def test_stale_object_conflicts(
        self, cluster: InMemoryClusterClient, writer: CouplerStatusWriter
    ) -> None:
        """A write based on an outdated resourceVersion is rejected."""
        [stored] = await seed(cluster, plug_manifest())
        stale = ModelPlug.model_validate(stored)
        await writer.update_plug(
            ModelPlug.model_validate(stored), EnumPhase.PENDING, EnumJoinedReason.PLUG_CREATED
        )

        with pytest.raises(ResourceConflictError):
            await writer.update_plug(
                stale, EnumPhase.PENDING, EnumJoinedReason.COUPLING_IN_PROCESS
            )

    @pytest.mark.asyncio
    async def test_coupled_fields_are_optional(
        self, cluster: InMemoryClusterClient, writer: CouplerStatusWriter
    ) -> None:
        """coupledSocket is only touched when passed; None clears it."""
        [stored] = await seed(cluster, plug_manifest())
        socket_ref = ModelCoupledReference(
            api_version="integration.rock8s.com/v1beta1",
            kind="Socket",
            name="db",
            namespace="default",
            uid="socket-uid",
        )
        plug = await writer.update_plug(
            ModelPlug.model_validate(stored),
            EnumPhase.PENDING,
            EnumJoinedReason.COUPLING_IN_PROCESS,
            coupled_socket=socket_ref,
        )
        plug = await writer.update_plug(
            plug, EnumPhase.SUCCEEDED, EnumJoinedReason.COUPLING_SUCCEEDED
        )
        assert plug.status.coupled_socket == socket_ref

        plug = await writer.update_plug(
            plug, EnumPhase.PENDING, EnumJoinedReason.PLUG_CREATED, coupled_socket=None
        )
        assert plug.status.coupled_socket is None


class TestSocketStatus:
    """Socket Joined counts and readiness."""

    @pytest.fixture
    def writer(
        self, cluster: InMemoryClusterClient, clock: DeterministicClock
    ) -> CouplerStatusWriter:
        return CouplerStatusWriter(cluster, clock)

    @pytest.mark.parametrize(
        ("count", "expected"),
        [(0, "0 plugs coupled"), (1, "1 plug coupled"), (3, "3 plugs coupled")],
    )
    def test_socket_coupled_message(self, count: int, expected: str) -> None:
        assert socket_coupled_message(count) == expected

    @pytest.mark.asyncio
    async def test_empty_socket_reports_socket_empty(
        self, cluster: InMemoryClusterClient, writer: CouplerStatusWriter
    ) -> None:
        """SocketCoupled with no plugs is written as SocketEmpty."""
        [stored] = await seed(cluster, socket_manifest())

        socket = await writer.update_socket(
            ModelSocket.model_validate(stored),
            EnumPhase.READY,
            EnumJoinedReason.SOCKET_COUPLED,
            ready=True,
        )

        joined = socket.status.conditions[0]
        assert joined.reason == "SocketEmpty"
        assert joined.message == "0 plugs coupled"
        assert not joined.is_true
        assert socket.status.ready is True

    @pytest.mark.asyncio
    async def test_coupled_count_in_message(
        self, cluster: InMemoryClusterClient, writer: CouplerStatusWriter
    ) -> None:
        [stored] = await seed(cluster, socket_manifest())
        socket = ModelSocket.model_validate(stored)
        socket.add_coupled_plug(_plug_ref(1))
        socket.add_coupled_plug(_plug_ref(2))

        socket = await writer.refresh_socket_coupled(socket)

        joined = socket.status.conditions[0]
        assert joined.reason == "SocketCoupled"
        assert joined.message == "2 plugs coupled"
        assert joined.is_true
        assert len(socket.status.coupled_plugs) == 2

    @pytest.mark.asyncio
    async def test_refresh_recovers_failed_phase(
        self, cluster: InMemoryClusterClient, writer: CouplerStatusWriter
    ) -> None:
        """Refreshing a failed socket puts it back to Ready and drops Failed."""
        [stored] = await seed(cluster, socket_manifest())
        socket = await writer.fail_socket(
            ModelSocket.model_validate(stored), RuntimeError("interface missing")
        )
        assert socket.status.phase is EnumPhase.FAILED

        socket = await writer.refresh_socket_coupled(socket)

        assert socket.status.phase is EnumPhase.READY
        assert [c.type for c in socket.status.conditions] == ["Joined"]
