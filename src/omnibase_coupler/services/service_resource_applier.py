# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Resource Applier.

Renders the templated manifests attached to a Plug, Socket or
DeferredResource and performs them against the cluster:

    - ``apply``: server-side apply (field manager ``integration-operator``,
      forced conflicts), creating the object when missing
    - ``delete``: delete, tolerating an object that is already gone
    - ``recreate``: delete, wait until the object is gone, then create

Template Forms:
    ``template``/``templates`` are structured manifests whose string leaves
    are rendered individually. ``stringTemplate``/``stringTemplates`` are
    rendered as text, then parsed as (multi-document) YAML.

Namespaced manifests without ``metadata.namespace`` are placed in the
owning object's namespace.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional
from uuid import UUID

import yaml

from omnibase_coupler.constants import FIELD_MANAGER
from omnibase_coupler.enums import EnumInfraTransportType, EnumResourceDo, EnumWhen
from omnibase_coupler.errors import (
    InfraTimeoutError,
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    ResourceNotFoundError,
)
from omnibase_coupler.models import ModelResource, ModelResourceAction
from omnibase_coupler.protocols import ProtocolClusterClient
from omnibase_coupler.services.service_template_renderer import ServiceTemplateRenderer

logger = logging.getLogger(__name__)


def build_resource_context(
    plug: Optional[dict[str, object]] = None,
    socket: Optional[dict[str, object]] = None,
    plug_config: Optional[dict[str, str]] = None,
    socket_config: Optional[dict[str, str]] = None,
    plug_result: Optional[dict[str, str]] = None,
    socket_result: Optional[dict[str, str]] = None,
) -> dict[str, object]:
    """Template context for resource manifests; absent values are omitted."""
    candidates: dict[str, object] = {
        "plug": plug,
        "socket": socket,
        "plugConfig": plug_config,
        "socketConfig": socket_config,
        "plugResult": plug_result,
        "socketResult": socket_result,
    }
    return {key: value for key, value in candidates.items() if value is not None}


class ServiceResourceApplier:
    """Applies templated resource actions through a cluster client."""

    def __init__(
        self,
        client: ProtocolClusterClient,
        renderer: ServiceTemplateRenderer,
        field_manager: str = FIELD_MANAGER,
        retry_attempts: int = 5,
        retry_interval_seconds: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._renderer = renderer
        self._field_manager = field_manager
        self._retry_attempts = retry_attempts
        self._retry_interval = retry_interval_seconds
        self._sleep = sleep

    @staticmethod
    def get_resources(
        resources: list[ModelResource],
        when: EnumWhen,
    ) -> list[ModelResource]:
        """Filter ``resources`` to those attached to ``when``.

        On ``decoupled``, ``apply`` actions marked ``retainWhenDecoupled``
        are skipped.
        """
        selected = [resource for resource in resources if resource.runs_on(when)]
        if when.normalized() is EnumWhen.DECOUPLED:
            selected = [
                resource
                for resource in selected
                if not (resource.retain_when_decoupled and resource.do is EnumResourceDo.APPLY)
            ]
        return selected

    def render_manifests(
        self,
        action: ModelResourceAction,
        context: dict[str, object],
    ) -> list[dict[str, object]]:
        """Render every template of ``action`` into concrete manifests.

        Raises:
            ProtocolConfigurationError: A template renders to something that
                is not a manifest (no apiVersion, kind or metadata.name)
        """
        rendered: list[object] = []
        if action.template is not None:
            rendered.append(self._renderer.render_structure(action.template, context))
        for template in action.templates or []:
            rendered.append(self._renderer.render_structure(template, context))
        string_templates = list(action.string_templates or [])
        if action.string_template:
            string_templates.insert(0, action.string_template)
        for template in string_templates:
            rendered.extend(
                self._parse_documents(self._renderer.render_string(template, context))
            )
        return [self._check_manifest(manifest) for manifest in rendered]

    async def process_resources(
        self,
        actions: list[ModelResourceAction],
        context: dict[str, object],
        namespace: Optional[str],
        client: Optional[ProtocolClusterClient] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Render and perform each action in order; the first failure propagates."""
        target = client or self._client
        for action in actions:
            for manifest in self.render_manifests(action, context):
                await self._default_namespace(target, manifest, namespace)
                api_version, kind, name, obj_namespace = _identity(manifest)
                logger.info(
                    "Processing resource",
                    extra={
                        "do": action.do.value,
                        "kind": kind,
                        "name": name,
                        "namespace": obj_namespace,
                        "correlation_id": str(correlation_id) if correlation_id else None,
                    },
                )
                if action.do is EnumResourceDo.APPLY:
                    await self.apply(manifest, target)
                elif action.do is EnumResourceDo.DELETE:
                    await self.delete(manifest, target)
                else:
                    await self.recreate(manifest, target)

    async def apply(
        self,
        manifest: dict[str, object],
        client: Optional[ProtocolClusterClient] = None,
    ) -> dict[str, object]:
        target = client or self._client
        return await target.apply(manifest, self._field_manager)

    async def delete(
        self,
        manifest: dict[str, object],
        client: Optional[ProtocolClusterClient] = None,
    ) -> bool:
        """Delete the object; returns False when it did not exist."""
        target = client or self._client
        api_version, kind, name, namespace = _identity(manifest)
        try:
            await target.delete(api_version, kind, name, namespace)
        except ResourceNotFoundError:
            logger.debug(
                "Resource already absent",
                extra={"kind": kind, "name": name, "namespace": namespace},
            )
            return False
        return True

    async def recreate(
        self,
        manifest: dict[str, object],
        client: Optional[ProtocolClusterClient] = None,
    ) -> dict[str, object]:
        """Delete, wait for the object to disappear, then create it again.

        Raises:
            InfraTimeoutError: The object is still present after the retry budget
        """
        target = client or self._client
        api_version, kind, name, namespace = _identity(manifest)
        if await self.delete(manifest, target):
            for attempt in range(self._retry_attempts):
                try:
                    await target.get(api_version, kind, name, namespace)
                except ResourceNotFoundError:
                    break
                logger.debug(
                    "Waiting for resource deletion",
                    extra={"kind": kind, "name": name, "attempt": attempt + 1},
                )
                await self._sleep(self._retry_interval)
            else:
                raise InfraTimeoutError(
                    f"{kind} {name} still exists after delete",
                    context=ModelInfraErrorContext(
                        transport_type=EnumInfraTransportType.KUBERNETES,
                        operation="recreate",
                        target_name=f"{kind} {name}",
                    ),
                    attempts=self._retry_attempts,
                )
        return await target.create(manifest)

    async def get_with_retry(
        self,
        api_version: str,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
        client: Optional[ProtocolClusterClient] = None,
    ) -> dict[str, object]:
        """Read an object that was just written, riding out propagation delay.

        Raises:
            ResourceNotFoundError: Still missing after every attempt
        """
        target = client or self._client
        last_error: Optional[ResourceNotFoundError] = None
        for attempt in range(self._retry_attempts):
            try:
                return await target.get(api_version, kind, name, namespace)
            except ResourceNotFoundError as e:
                last_error = e
                logger.debug(
                    "Resource not visible yet",
                    extra={"kind": kind, "name": name, "attempt": attempt + 1},
                )
                if attempt + 1 < self._retry_attempts:
                    await self._sleep(self._retry_interval)
        assert last_error is not None
        raise last_error

    @staticmethod
    async def _default_namespace(
        client: ProtocolClusterClient,
        manifest: dict[str, object],
        namespace: Optional[str],
    ) -> None:
        metadata = manifest["metadata"]
        assert isinstance(metadata, dict)
        if metadata.get("namespace") or not namespace:
            return
        if await client.is_namespaced(str(manifest["apiVersion"]), str(manifest["kind"])):
            metadata["namespace"] = namespace

    @staticmethod
    def _parse_documents(text: str) -> list[object]:
        try:
            return [doc for doc in yaml.safe_load_all(text) if doc is not None]
        except yaml.YAMLError as e:
            raise ProtocolConfigurationError(
                "Rendered resource template is not valid YAML",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="parse_template",
                ),
            ) from e

    @staticmethod
    def _check_manifest(manifest: object) -> dict[str, object]:
        metadata = manifest.get("metadata") if isinstance(manifest, dict) else None
        if (
            not isinstance(manifest, dict)
            or not manifest.get("apiVersion")
            or not manifest.get("kind")
            or not isinstance(metadata, dict)
            or not metadata.get("name")
        ):
            raise ProtocolConfigurationError(
                "Rendered resource must declare apiVersion, kind and metadata.name",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="render_resource",
                ),
            )
        return manifest


def _identity(manifest: dict[str, object]) -> tuple[str, str, str, Optional[str]]:
    metadata = manifest.get("metadata") or {}
    assert isinstance(metadata, dict)
    return (
        str(manifest["apiVersion"]),
        str(manifest["kind"]),
        str(metadata["name"]),
        metadata.get("namespace"),
    )


__all__ = ["ServiceResourceApplier", "build_resource_context"]
