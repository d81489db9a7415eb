# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Config and Result Resolver.

Produces the effective string maps one side of a coupling exchanges with
the other. Sources are merged in a fixed order, later sources winning:

    data:    dataSecretName < data < dataConfigMapName
    config:  configSecretName < config < configTemplate < configConfigMapName
             < apparatus ``/config`` response
    result:  resultSecretName < result < resultTemplate < resultConfigMapName

The merged config/result map is then validated against the matching side
of the Interface: required properties must be present, defaults fill gaps
and undeclared keys are dropped. Without an Interface section the map
passes through unchanged.

For fixed object state, referenced objects and schema, the resolved map is
a pure function of its inputs.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional
from uuid import UUID

from omnibase_coupler.enums import EnumCoupledKind, EnumInfraTransportType
from omnibase_coupler.errors import (
    InterfaceValidationError,
    ModelInfraErrorContext,
    ProtocolConfigurationError,
)
from omnibase_coupler.handlers import HandlerApparatus
from omnibase_coupler.models import (
    CouplingObject,
    ModelInterface,
    ModelPlug,
    ModelSchemaProperty,
    ModelSocket,
)
from omnibase_coupler.protocols import ProtocolClusterClient
from omnibase_coupler.services.service_template_renderer import ServiceTemplateRenderer
from omnibase_coupler.services.service_var_resolver import ServiceVarResolver

logger = logging.getLogger(__name__)

SECTION_CONFIG = "config"
SECTION_RESULT = "result"


def validate_against_interface(
    values: dict[str, str],
    schema: Optional[dict[str, ModelSchemaProperty]],
    side: EnumCoupledKind,
    section: str,
) -> dict[str, str]:
    """Project ``values`` onto ``schema``.

    Raises:
        InterfaceValidationError: A required property is absent
    """
    if schema is None:
        return dict(values)
    validated: dict[str, str] = {}
    for name in sorted(schema):
        prop = schema[name]
        if name in values:
            validated[name] = values[name]
        elif prop.required:
            raise InterfaceValidationError(
                side=side.value, section=section, property_name=name
            )
        elif prop.default:
            validated[name] = prop.default
    return validated


class ServiceConfigResolver:
    """Resolves data, config and result maps for Plugs and Sockets."""

    def __init__(
        self,
        client: ProtocolClusterClient,
        var_resolver: ServiceVarResolver,
        renderer: ServiceTemplateRenderer,
        apparatus: Optional[HandlerApparatus] = None,
    ) -> None:
        self._client = client
        self._vars = var_resolver
        self._renderer = renderer
        self._apparatus = apparatus

    def client_for(self, owner: CouplingObject) -> ProtocolClusterClient:
        """Cluster client scoped to the owner's service account, if any."""
        account = owner.spec.service_account_name
        if account and owner.namespace:
            return self._client.for_service_account(owner.namespace, account)
        return self._client

    async def get_data(self, owner: Optional[CouplingObject]) -> dict[str, str]:
        if owner is None:
            return {}
        client = self.client_for(owner)
        spec = owner.spec
        data: dict[str, str] = {}
        if spec.data_secret_name:
            data.update(await self._read_secret(client, owner, spec.data_secret_name))
        data.update(spec.data)
        if spec.data_config_map_name:
            data.update(
                await self._read_config_map(client, owner, spec.data_config_map_name)
            )
        return data

    async def get_vars(self, owner: CouplingObject) -> dict[str, str]:
        return await self._vars.resolve(
            owner.spec.vars, owner.namespace, self.client_for(owner)
        )

    async def get_config(
        self,
        kind: EnumCoupledKind,
        owner: CouplingObject,
        interface: Optional[ModelInterface],
        correlation_id: Optional[UUID] = None,
    ) -> dict[str, str]:
        """Resolve and validate the config map of one side.

        Raises:
            InterfaceValidationError: A required config property is absent
            ApparatusError: The apparatus ``/config`` call failed
            ResourceNotFoundError: A referenced secret, configmap or Var
                object does not exist
        """
        client = self.client_for(owner)
        spec = owner.spec
        data = await self.get_data(owner)
        variables = await self.get_vars(owner)

        config: dict[str, str] = {}
        if spec.config_secret_name:
            config.update(await self._read_secret(client, owner, spec.config_secret_name))
        config.update(spec.config)
        if spec.config_template:
            manifest = owner.to_template_context()
            context: dict[str, object] = {
                "resource": manifest,
                kind.value: manifest,
                "data": data,
                "vars": variables,
            }
            config.update(self._renderer.render_map(spec.config_template, context))
        if spec.config_config_map_name:
            config.update(
                await self._read_config_map(client, owner, spec.config_config_map_name)
            )
        endpoint = spec.apparatus_endpoint
        if endpoint:
            config.update(
                await self._require_apparatus().get_config(
                    endpoint, kind, owner, data, variables, correlation_id
                )
            )

        schema = interface.spec.config.for_side(kind) if interface else None
        return validate_against_interface(config, schema, kind, SECTION_CONFIG)

    async def get_result(
        self,
        kind: EnumCoupledKind,
        plug: ModelPlug,
        socket: ModelSocket,
        plug_config: dict[str, str],
        socket_config: dict[str, str],
        interface: Optional[ModelInterface],
    ) -> dict[str, str]:
        """Resolve and validate the result map of one side.

        Raises:
            InterfaceValidationError: A required result property is absent
        """
        owner: CouplingObject = plug if kind is EnumCoupledKind.PLUG else socket
        client = self.client_for(owner)
        spec = owner.spec

        result: dict[str, str] = {}
        if spec.result_secret_name:
            result.update(await self._read_secret(client, owner, spec.result_secret_name))
        result.update(spec.result)
        if spec.result_template:
            variables = await self.get_vars(owner)
            if spec.result_vars:
                variables.update(
                    await self._vars.resolve(spec.result_vars, owner.namespace, client)
                )
            context: dict[str, object] = {
                "plug": plug.to_template_context(),
                "socket": socket.to_template_context(),
                "plugData": await self.get_data(plug),
                "socketData": await self.get_data(socket),
                "plugConfig": plug_config,
                "socketConfig": socket_config,
                "vars": variables,
            }
            result.update(self._renderer.render_map(spec.result_template, context))
        if spec.result_config_map_name:
            result.update(
                await self._read_config_map(client, owner, spec.result_config_map_name)
            )

        schema = interface.spec.result.for_side(kind) if interface else None
        return validate_against_interface(result, schema, kind, SECTION_RESULT)

    def _require_apparatus(self) -> HandlerApparatus:
        if self._apparatus is None:
            raise ProtocolConfigurationError(
                "An apparatus endpoint is configured but no apparatus handler is available",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.HTTP,
                    operation="get_config",
                ),
            )
        return self._apparatus

    @staticmethod
    async def _read_secret(
        client: ProtocolClusterClient,
        owner: CouplingObject,
        name: str,
    ) -> dict[str, str]:
        secret = await client.get("v1", "Secret", name, owner.namespace)
        decoded: dict[str, str] = {}
        for key, value in (secret.get("data") or {}).items():  # type: ignore[union-attr]
            try:
                decoded[key] = base64.b64decode(str(value)).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as e:
                raise ProtocolConfigurationError(
                    f"Secret {owner.namespace}/{name} key '{key}' is not valid base64 text",
                    context=ModelInfraErrorContext(
                        transport_type=EnumInfraTransportType.KUBERNETES,
                        operation="read_secret",
                        target_name=f"{owner.namespace}/{name}",
                    ),
                ) from e
        for key, value in (secret.get("stringData") or {}).items():  # type: ignore[union-attr]
            decoded[key] = str(value)
        return decoded

    @staticmethod
    async def _read_config_map(
        client: ProtocolClusterClient,
        owner: CouplingObject,
        name: str,
    ) -> dict[str, str]:
        config_map = await client.get("v1", "ConfigMap", name, owner.namespace)
        return {
            str(key): str(value)
            for key, value in (config_map.get("data") or {}).items()  # type: ignore[union-attr]
        }


__all__ = [
    "SECTION_CONFIG",
    "SECTION_RESULT",
    "ServiceConfigResolver",
    "validate_against_interface",
]
