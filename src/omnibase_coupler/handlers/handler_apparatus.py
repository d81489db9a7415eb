# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Apparatus Handler - HTTP webhook client using httpx async client.

An apparatus is an external HTTP endpoint a Plug or Socket declares. The
engine POSTs JSON to ``<endpoint>/<event>``:

    - ``config``: body ``{"version": "1", "plug"|"socket", "data", "vars"}``;
      the JSON object in the response is the resolved configuration
    - ``created``, ``coupled``, ``updated``, ``decoupled``, ``deleted``,
      ``broken``: body ``{"version": "1", "plug"?, "socket"?, "plugConfig"?,
      "socketConfig"?}``; the response body is ignored

Any transport failure or non-2xx answer fails the triggering reconcile pass.
"""

from __future__ import annotations

import json
import logging
from typing import Optional
from uuid import UUID, uuid4

import httpx

from omnibase_coupler.constants import APPARATUS_CONFIG_PATH, APPARATUS_PROTOCOL_VERSION
from omnibase_coupler.enums import (
    EnumCoupledKind,
    EnumCouplingTopic,
    EnumInfraTransportType,
)
from omnibase_coupler.errors import (
    ApparatusError,
    InfraTimeoutError,
    InfraUnavailableError,
    ModelInfraErrorContext,
)
from omnibase_coupler.models import ModelClusterObject
from omnibase_coupler.utils import format_field_value, join_endpoint

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS: float = 30.0


class HandlerApparatus:
    """Apparatus webhook client.

    Example:
        ```python
        apparatus = HandlerApparatus(timeout_seconds=10.0)
        await apparatus.initialize()
        config = await apparatus.get_config(
            "apparatus.default.svc:8080",
            EnumCoupledKind.SOCKET,
            socket,
            data={},
            variables={},
        )
        await apparatus.shutdown()
        ```
    """

    def __init__(
        self,
        timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize HandlerApparatus in uninitialized state.

        Args:
            timeout_seconds: Per-request timeout
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self._timeout = timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create the underlying httpx.AsyncClient."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=True,
            transport=self._transport,
        )
        logger.info(
            "HandlerApparatus initialized",
            extra={"timeout_seconds": self._timeout},
        )

    async def shutdown(self) -> None:
        """Close HTTP client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        logger.info("HandlerApparatus shutdown complete")

    async def get_config(
        self,
        endpoint: str,
        kind: EnumCoupledKind,
        obj: ModelClusterObject,
        data: dict[str, str],
        variables: dict[str, str],
        correlation_id: Optional[UUID] = None,
    ) -> dict[str, str]:
        """POST ``/config`` and return the response object as a string map.

        Raises:
            ApparatusError: Transport failure, non-2xx answer, or a body that
                is not a JSON object
            InfraTimeoutError: The request timed out
        """
        correlation_id = correlation_id or uuid4()
        body: dict[str, object] = {
            "version": APPARATUS_PROTOCOL_VERSION,
            kind.value: obj.to_manifest(),
            "data": data,
            "vars": variables,
        }
        response = await self._post(endpoint, APPARATUS_CONFIG_PATH, body, correlation_id)
        ctx = self._context(endpoint, APPARATUS_CONFIG_PATH, correlation_id)
        try:
            payload = json.loads(response.content or b"{}")
        except json.JSONDecodeError as e:
            raise ApparatusError(
                "Apparatus config response is not valid JSON", context=ctx
            ) from e
        if not isinstance(payload, dict):
            raise ApparatusError(
                "Apparatus config response must be a JSON object",
                context=ctx,
                payload_type=type(payload).__name__,
            )
        return {str(key): format_field_value(value) for key, value in payload.items()}

    async def post_event(
        self,
        endpoint: str,
        event: EnumCouplingTopic,
        plug: Optional[ModelClusterObject] = None,
        socket: Optional[ModelClusterObject] = None,
        plug_config: Optional[dict[str, str]] = None,
        socket_config: Optional[dict[str, str]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """POST a lifecycle notification to ``<endpoint>/<event>``."""
        body: dict[str, object] = {"version": APPARATUS_PROTOCOL_VERSION}
        if plug is not None:
            body["plug"] = plug.to_manifest()
        if socket is not None:
            body["socket"] = socket.to_manifest()
        if plug_config is not None:
            body["plugConfig"] = plug_config
        if socket_config is not None:
            body["socketConfig"] = socket_config
        await self._post(endpoint, event.value, body, correlation_id or uuid4())

    async def _post(
        self,
        endpoint: str,
        path: str,
        body: dict[str, object],
        correlation_id: UUID,
    ) -> httpx.Response:
        ctx = self._context(endpoint, path, correlation_id)
        if self._client is None:
            raise InfraUnavailableError(
                "HandlerApparatus not initialized - call initialize() first",
                context=ctx,
            )
        url = join_endpoint(endpoint, path)
        try:
            response = await self._client.post(url, json=body)
        except httpx.TimeoutException as e:
            raise InfraTimeoutError(
                f"Apparatus request timed out after {self._timeout}s",
                context=ctx,
                timeout_seconds=self._timeout,
            ) from e
        except httpx.HTTPError as e:
            raise ApparatusError(
                f"Apparatus request failed: {type(e).__name__}", context=ctx
            ) from e

        logger.debug(
            "Apparatus responded",
            extra={
                "url": url,
                "status_code": response.status_code,
                "correlation_id": str(correlation_id),
            },
        )
        if not response.is_success:
            raise ApparatusError(
                f"Apparatus returned HTTP {response.status_code} for '{path}'",
                context=ctx,
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _context(endpoint: str, path: str, correlation_id: UUID) -> ModelInfraErrorContext:
        return ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.HTTP,
            operation=f"apparatus.{path}",
            target_name=endpoint,
            correlation_id=correlation_id,
        )

    async def health_check(self) -> dict[str, object]:
        """Return handler health status."""
        return {
            "healthy": self._client is not None,
            "initialized": self._client is not None,
            "timeout_seconds": self._timeout,
        }


__all__: list[str] = ["HandlerApparatus"]
