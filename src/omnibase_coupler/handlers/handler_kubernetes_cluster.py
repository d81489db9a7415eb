# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Kubernetes Cluster Handler - kind-agnostic access via the dynamic client.

Implements ProtocolClusterClient on top of ``kubernetes.dynamic.DynamicClient``.
Manifests are resolved to their REST collection through API discovery, so
the engine can create, apply and delete any kind a template describes.

The kubernetes client is synchronous; every call runs in a worker thread
via ``asyncio.to_thread``. Watches run on a dedicated daemon thread that
lists, then watches from the list's resourceVersion, and re-lists when the
server answers ``410 Gone``.

Error Mapping:
    - 404 -> ResourceNotFoundError (also for kinds discovery does not know)
    - 409 with reason AlreadyExists -> ResourceAlreadyExistsError
    - 409 otherwise -> ResourceConflictError
    - 408/504 -> InfraTimeoutError
    - anything else -> InfraConnectionError
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections.abc import AsyncIterator, Callable
from typing import Optional

import urllib3
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes import watch as k8s_watch
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic import exceptions as dynamic_exceptions
from kubernetes.dynamic.resource import Resource

from omnibase_coupler.enums import EnumInfraTransportType
from omnibase_coupler.errors import (
    CouplerError,
    InfraConnectionError,
    InfraTimeoutError,
    ModelInfraErrorContext,
    ResourceAlreadyExistsError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from omnibase_coupler.models import ModelWatchEvent

logger = logging.getLogger(__name__)

_WATCH_TIMEOUT_SECONDS: int = 300
_WATCH_BACKOFF_MAX_SECONDS: float = 30.0
_MERGE_PATCH = "application/merge-patch+json"


class HandlerKubernetesCluster:
    """Cluster client backed by the kubernetes dynamic client.

    Example:
        ```python
        cluster = HandlerKubernetesCluster.from_environment()
        await cluster.initialize()
        socket = await cluster.get(
            "integration.rock8s.com/v1beta1", "Socket", "db", "default"
        )
        ```
    """

    def __init__(self, api_client: k8s_client.ApiClient) -> None:
        self._api_client = api_client
        self._dynamic: Optional[DynamicClient] = None
        self._dynamic_lock = asyncio.Lock()
        self._impersonated: dict[tuple[str, str], HandlerKubernetesCluster] = {}

    @classmethod
    def from_environment(cls) -> HandlerKubernetesCluster:
        """In-cluster service account config, else the local kubeconfig."""
        try:
            k8s_config.load_incluster_config()
            logger.info("Loaded in-cluster Kubernetes configuration")
        except k8s_config.ConfigException:
            k8s_config.load_kube_config()
            logger.info("Loaded kubeconfig Kubernetes configuration")
        return cls(k8s_client.ApiClient())

    async def initialize(self) -> None:
        """Build the dynamic client (performs API discovery)."""
        await self._client()

    async def shutdown(self) -> None:
        for impersonated in self._impersonated.values():
            await impersonated.shutdown()
        self._impersonated.clear()
        self._api_client.close()
        self._dynamic = None
        logger.info("HandlerKubernetesCluster shutdown complete")

    def for_service_account(self, namespace: str, name: str) -> HandlerKubernetesCluster:
        """A handler whose requests impersonate the given service account.

        One handler is kept per service account, so its connection pool and
        discovery are reused across passes. ``shutdown`` closes them.
        """
        key = (namespace, name)
        handler = self._impersonated.get(key)
        if handler is None:
            api_client = k8s_client.ApiClient(self._api_client.configuration)
            api_client.set_default_header(
                "Impersonate-User", f"system:serviceaccount:{namespace}:{name}"
            )
            handler = HandlerKubernetesCluster(api_client)
            self._impersonated[key] = handler
            logger.debug(
                "Created impersonating cluster handler",
                extra={"namespace": namespace, "service_account": name},
            )
        return handler

    # =========================================================================
    # ProtocolClusterClient
    # =========================================================================

    async def get(
        self,
        api_version: str,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
    ) -> dict[str, object]:
        dyn = await self._client()
        resource = await self._resource(api_version, kind)
        instance = await self._call(
            "get",
            self._target(kind, name, namespace),
            dyn.get,
            resource,
            name=name,
            namespace=self._scope(resource, namespace),
        )
        return instance.to_dict()

    async def list(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
        label_selector: Optional[str] = None,
    ) -> list[dict[str, object]]:
        dyn = await self._client()
        resource = await self._resource(api_version, kind)
        listing = await self._call(
            "list",
            kind,
            dyn.get,
            resource,
            namespace=self._scope(resource, namespace),
            label_selector=label_selector,
        )
        return list(listing.to_dict().get("items") or [])

    async def watch(
        self,
        api_version: str,
        kind: str,
        namespace: Optional[str] = None,
    ) -> AsyncIterator[ModelWatchEvent]:
        dyn = await self._client()
        resource = await self._resource(api_version, kind)
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[ModelWatchEvent] = asyncio.Queue()
        stop = threading.Event()
        watcher = k8s_watch.Watch()

        def emit(event_type: str, obj: dict[str, object]) -> None:
            event = ModelWatchEvent(type=event_type, object=obj)  # type: ignore[arg-type]
            loop.call_soon_threadsafe(queue.put_nowait, event)

        thread = threading.Thread(
            target=self._watch_loop,
            args=(dyn, resource, namespace, watcher, stop, emit),
            name=f"watch-{kind}",
            daemon=True,
        )
        thread.start()
        try:
            while True:
                yield await queue.get()
        finally:
            stop.set()
            watcher.stop()

    async def create(self, manifest: dict[str, object]) -> dict[str, object]:
        dyn = await self._client()
        api_version, kind, name, namespace = _identity(manifest)
        resource = await self._resource(api_version, kind)
        instance = await self._call(
            "create",
            self._target(kind, name, namespace),
            dyn.create,
            resource,
            body=manifest,
            namespace=self._scope(resource, namespace),
        )
        return instance.to_dict()

    async def update(self, manifest: dict[str, object]) -> dict[str, object]:
        dyn = await self._client()
        api_version, kind, name, namespace = _identity(manifest)
        resource = await self._resource(api_version, kind)
        instance = await self._call(
            "update",
            self._target(kind, name, namespace),
            dyn.replace,
            resource,
            body=manifest,
            name=name,
            namespace=self._scope(resource, namespace),
        )
        return instance.to_dict()

    async def update_status(self, manifest: dict[str, object]) -> dict[str, object]:
        dyn = await self._client()
        api_version, kind, name, namespace = _identity(manifest)
        resource = await self._resource(api_version, kind)
        status = resource.subresources["status"]
        instance = await self._call(
            "update_status",
            self._target(kind, name, namespace),
            dyn.replace,
            status,
            body=manifest,
            name=name,
            namespace=self._scope(resource, namespace),
        )
        return instance.to_dict()

    async def patch(
        self,
        api_version: str,
        kind: str,
        name: str,
        patch: dict[str, object],
        namespace: Optional[str] = None,
    ) -> dict[str, object]:
        dyn = await self._client()
        resource = await self._resource(api_version, kind)
        instance = await self._call(
            "patch",
            self._target(kind, name, namespace),
            dyn.patch,
            resource,
            body=patch,
            name=name,
            namespace=self._scope(resource, namespace),
            content_type=_MERGE_PATCH,
        )
        return instance.to_dict()

    async def apply(
        self,
        manifest: dict[str, object],
        field_manager: str,
    ) -> dict[str, object]:
        dyn = await self._client()
        api_version, kind, name, namespace = _identity(manifest)
        resource = await self._resource(api_version, kind)
        instance = await self._call(
            "apply",
            self._target(kind, name, namespace),
            dyn.server_side_apply,
            resource,
            body=manifest,
            name=name,
            namespace=self._scope(resource, namespace),
            field_manager=field_manager,
            force_conflicts=True,
        )
        return instance.to_dict()

    async def delete(
        self,
        api_version: str,
        kind: str,
        name: str,
        namespace: Optional[str] = None,
    ) -> None:
        dyn = await self._client()
        resource = await self._resource(api_version, kind)
        await self._call(
            "delete",
            self._target(kind, name, namespace),
            dyn.delete,
            resource,
            name=name,
            namespace=self._scope(resource, namespace),
        )

    async def is_namespaced(self, api_version: str, kind: str) -> bool:
        resource = await self._resource(api_version, kind)
        return bool(resource.namespaced)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _client(self) -> DynamicClient:
        async with self._dynamic_lock:
            if self._dynamic is None:
                self._dynamic = await self._call(
                    "discovery", "api", DynamicClient, self._api_client
                )
            return self._dynamic

    async def _resource(self, api_version: str, kind: str) -> Resource:
        dyn = await self._client()
        try:
            return await asyncio.to_thread(
                dyn.resources.get, api_version=api_version, kind=kind
            )
        except dynamic_exceptions.ResourceNotFoundError as e:
            raise ResourceNotFoundError(
                f"Kind {kind} is not served by {api_version}",
                context=self._context("discovery", kind),
                kind=kind,
            ) from e

    @staticmethod
    def _scope(resource: Resource, namespace: Optional[str]) -> Optional[str]:
        return namespace if resource.namespaced else None

    @staticmethod
    def _target(kind: str, name: str, namespace: Optional[str]) -> str:
        return f"{kind} {namespace}/{name}" if namespace else f"{kind} {name}"

    @staticmethod
    def _context(operation: str, target: str) -> ModelInfraErrorContext:
        return ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.KUBERNETES,
            operation=operation,
            target_name=target,
        )

    async def _call(
        self,
        operation: str,
        target: str,
        func: Callable[..., object],
        *args: object,
        **kwargs: object,
    ) -> object:
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except ApiException as e:
            raise _translate_api_exception(e, self._context(operation, target)) from e
        except urllib3.exceptions.HTTPError as e:
            raise InfraConnectionError(
                f"Kubernetes API unreachable during {operation}: {type(e).__name__}",
                context=self._context(operation, target),
            ) from e

    @staticmethod
    def _watch_loop(
        dyn: DynamicClient,
        resource: Resource,
        namespace: Optional[str],
        watcher: k8s_watch.Watch,
        stop: threading.Event,
        emit: Callable[[str, dict[str, object]], None],
    ) -> None:
        resource_version: Optional[str] = None
        backoff = 1.0
        scope = namespace if resource.namespaced else None
        while not stop.is_set():
            try:
                if resource_version is None:
                    listing = dyn.get(resource, namespace=scope).to_dict()
                    resource_version = listing["metadata"]["resourceVersion"]
                    for item in listing.get("items") or []:
                        emit("ADDED", item)
                for event in dyn.watch(
                    resource,
                    namespace=scope,
                    resource_version=resource_version,
                    timeout=_WATCH_TIMEOUT_SECONDS,
                    watcher=watcher,
                ):
                    if stop.is_set():
                        return
                    event_type = event["type"]
                    raw = event["raw_object"]
                    if event_type == "ERROR":
                        if raw.get("code") == 410:
                            resource_version = None
                            break
                        raise ApiException(status=raw.get("code"), reason=raw.get("message"))
                    if event_type not in ("ADDED", "MODIFIED", "DELETED"):
                        continue
                    resource_version = raw["metadata"]["resourceVersion"]
                    emit(event_type, raw)
                backoff = 1.0
            except ApiException as e:
                if e.status == 410:
                    logger.warning(
                        "Watch resource version expired, re-listing",
                        extra={"kind": resource.kind},
                    )
                    resource_version = None
                    continue
                logger.exception(
                    "Kubernetes API watch error",
                    extra={"kind": resource.kind, "status": e.status},
                )
                stop.wait(backoff)
                backoff = min(backoff * 2, _WATCH_BACKOFF_MAX_SECONDS)
            except Exception:
                logger.exception("Unexpected watch error", extra={"kind": resource.kind})
                stop.wait(backoff)
                backoff = min(backoff * 2, _WATCH_BACKOFF_MAX_SECONDS)


def _identity(manifest: dict[str, object]) -> tuple[str, str, str, Optional[str]]:
    metadata = manifest.get("metadata") or {}
    assert isinstance(metadata, dict)
    return (
        str(manifest.get("apiVersion", "")),
        str(manifest.get("kind", "")),
        str(metadata.get("name", "")),
        metadata.get("namespace"),
    )


def _translate_api_exception(
    error: ApiException,
    context: ModelInfraErrorContext,
) -> CouplerError:
    reason = ""
    if error.body:
        try:
            body = json.loads(error.body)
        except (TypeError, ValueError):
            body = {}
        if isinstance(body, dict):
            reason = str(body.get("reason") or "")
    message = f"{context.target_name}: {error.reason or 'error'} (HTTP {error.status})"
    if error.status == 404:
        return ResourceNotFoundError(message, context=context)
    if error.status == 409:
        if reason == "AlreadyExists":
            return ResourceAlreadyExistsError(message, context=context)
        return ResourceConflictError(message, context=context)
    if error.status in (408, 504):
        return InfraTimeoutError(message, context=context, status_code=error.status)
    return InfraConnectionError(message, context=context, status_code=error.status)


__all__: list[str] = ["HandlerKubernetesCluster"]
