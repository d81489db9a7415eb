# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for HandlerApparatus using httpx.MockTransport."""

from __future__ import annotations

import httpx
import pytest

from omnibase_coupler.enums import EnumCoupledKind, EnumCouplingTopic
from omnibase_coupler.errors import (
    ApparatusError,
    InfraTimeoutError,
    InfraUnavailableError,
)
from omnibase_coupler.handlers import HandlerApparatus
from omnibase_coupler.models import ModelPlug, ModelSocket
from tests.helpers.coupling_builders import (
    APPARATUS_ENDPOINT,
    ApparatusRecorder,
    failing_transport,
    plug_manifest,
    socket_manifest,
)


class TestHandlerApparatusConfig:
    """POST /config and response decoding."""

    @pytest.fixture
    def socket(self) -> ModelSocket:
        return ModelSocket.model_validate(socket_manifest())

    @pytest.mark.asyncio
    async def test_get_config_posts_versioned_body(self, socket: ModelSocket) -> None:
        """The request carries the protocol version, the object, data and vars."""
        recorder = ApparatusRecorder({"/config": {"host": "10.0.0.5", "port": 5432}})
        apparatus = HandlerApparatus(transport=recorder.transport())
        await apparatus.initialize()

        config = await apparatus.get_config(
            APPARATUS_ENDPOINT,
            EnumCoupledKind.SOCKET,
            socket,
            data={"database": "app"},
            variables={"ip": "10.0.0.5"},
        )

        assert config == {"host": "10.0.0.5", "port": "5432"}
        path, body = recorder.requests[0]
        assert path == "/config"
        assert body["version"] == "1"
        assert body["socket"]["metadata"]["name"] == "db"
        assert body["data"] == {"database": "app"}
        assert body["vars"] == {"ip": "10.0.0.5"}
        await apparatus.shutdown()

    @pytest.mark.asyncio
    async def test_non_object_response_rejected(self, socket: ModelSocket) -> None:
        """A JSON array is not a configuration."""
        recorder = ApparatusRecorder({"/config": ["host"]})
        apparatus = HandlerApparatus(transport=recorder.transport())
        await apparatus.initialize()

        with pytest.raises(ApparatusError, match="JSON object"):
            await apparatus.get_config(
                APPARATUS_ENDPOINT, EnumCoupledKind.SOCKET, socket, {}, {}
            )
        await apparatus.shutdown()

    @pytest.mark.asyncio
    async def test_invalid_json_rejected(self, socket: ModelSocket) -> None:
        """A body that is not JSON fails the call."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="ok"))
        apparatus = HandlerApparatus(transport=transport)
        await apparatus.initialize()

        with pytest.raises(ApparatusError, match="not valid JSON"):
            await apparatus.get_config(
                APPARATUS_ENDPOINT, EnumCoupledKind.SOCKET, socket, {}, {}
            )
        await apparatus.shutdown()


class TestHandlerApparatusEvents:
    """Lifecycle notifications."""

    @pytest.mark.asyncio
    async def test_post_event_includes_only_known_parts(self) -> None:
        """Absent objects and configs are omitted from the body."""
        recorder = ApparatusRecorder()
        apparatus = HandlerApparatus(transport=recorder.transport())
        await apparatus.initialize()
        plug = ModelPlug.model_validate(plug_manifest())

        await apparatus.post_event(
            "apparatus.default.svc:8080/",
            EnumCouplingTopic.COUPLED,
            plug=plug,
            socket_config={"host": "10.0.0.5"},
        )

        path, body = recorder.requests[0]
        assert path == "/coupled"
        assert body == {
            "version": "1",
            "plug": plug.to_manifest(),
            "socketConfig": {"host": "10.0.0.5"},
        }
        await apparatus.shutdown()

    @pytest.mark.asyncio
    async def test_non_2xx_raises_apparatus_error(self) -> None:
        """Any non-2xx answer fails the call with the status code attached."""
        recorder = ApparatusRecorder(status_code=503)
        apparatus = HandlerApparatus(transport=recorder.transport())
        await apparatus.initialize()

        with pytest.raises(ApparatusError) as exc_info:
            await apparatus.post_event(APPARATUS_ENDPOINT, EnumCouplingTopic.DELETED)
        assert exc_info.value.context["status_code"] == 503
        await apparatus.shutdown()

    @pytest.mark.asyncio
    async def test_timeout_maps_to_infra_timeout(self) -> None:
        """httpx timeouts become InfraTimeoutError."""
        transport = failing_transport(lambda request: httpx.ReadTimeout("slow", request=request))
        apparatus = HandlerApparatus(timeout_seconds=0.5, transport=transport)
        await apparatus.initialize()

        with pytest.raises(InfraTimeoutError):
            await apparatus.post_event(APPARATUS_ENDPOINT, EnumCouplingTopic.BROKEN)
        await apparatus.shutdown()

    @pytest.mark.asyncio
    async def test_connection_error_maps_to_apparatus_error(self) -> None:
        """Connection failures become ApparatusError."""
        transport = failing_transport(
            lambda request: httpx.ConnectError("refused", request=request)
        )
        apparatus = HandlerApparatus(transport=transport)
        await apparatus.initialize()

        with pytest.raises(ApparatusError, match="ConnectError"):
            await apparatus.post_event(APPARATUS_ENDPOINT, EnumCouplingTopic.CREATED)
        await apparatus.shutdown()


class TestHandlerApparatusLifecycle:
    @pytest.mark.asyncio
    async def test_requires_initialize(self) -> None:
        """Calls before initialize() are rejected."""
        apparatus = HandlerApparatus()
        with pytest.raises(InfraUnavailableError, match="not initialized"):
            await apparatus.post_event(APPARATUS_ENDPOINT, EnumCouplingTopic.CREATED)

    @pytest.mark.asyncio
    async def test_health_check_tracks_client(self) -> None:
        """Health flips with initialize and shutdown."""
        apparatus = HandlerApparatus(transport=ApparatusRecorder().transport())
        assert (await apparatus.health_check())["healthy"] is False
        await apparatus.initialize()
        assert (await apparatus.health_check())["healthy"] is True
        await apparatus.shutdown()
        assert (await apparatus.health_check())["initialized"] is False
