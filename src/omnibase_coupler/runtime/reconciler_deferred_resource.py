# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""DeferredResource reconciler.

A DeferredResource applies its manifest once ``timeout`` seconds have
passed since it was created and every ``waitFor`` object exists:

    - Before the timeout: ``Resolved=False/Pending`` ("waiting for
      timeout"), requeued for the remaining time.
    - A missing ``waitFor`` object: ``Resolved=False/Pending`` ("waiting
      for resource"), requeued after the pending interval.
    - Otherwise the manifest is applied in the DeferredResource's namespace
      (unless it already exists), read back with retry, recorded as
      ``ownerReference`` and ``Resolved=True/Success`` is written.

Deleting the DeferredResource deletes the applied object, tolerating one
that is already gone, before the finalizer is released.

Errors other than optimistic-lock conflicts add ``Failed=True/Error`` with
the error text and leave ``Resolved`` as it was; the error then propagates
so the controller backs off.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from omnibase_coupler.constants import (
    API_VERSION,
    DEFERRED_RESOURCE_FINALIZER,
    KIND_DEFERRED_RESOURCE,
)
from omnibase_coupler.enums import (
    EnumConditionStatus,
    EnumConditionType,
    EnumInfraTransportType,
    EnumResolvedReason,
)
from omnibase_coupler.errors import (
    CouplerError,
    ModelInfraErrorContext,
    ProtocolConfigurationError,
    ResourceConflictError,
    ResourceNotFoundError,
)
from omnibase_coupler.models import (
    ModelCouplerConfig,
    ModelDeferredResource,
    ModelNamespacedName,
    ModelOwnerReference,
    ModelReconcileResult,
)
from omnibase_coupler.protocols import ProtocolClusterClient
from omnibase_coupler.services import ServiceResourceApplier
from omnibase_coupler.utils import build_condition, set_condition, utc_now

logger = logging.getLogger(__name__)

MESSAGE_WAITING_FOR_TIMEOUT = "waiting for timeout"
MESSAGE_WAITING_FOR_RESOURCE = "waiting for resource"


class ReconcilerDeferredResource:
    """Reconciles DeferredResource objects."""

    def __init__(
        self,
        client: ProtocolClusterClient,
        applier: ServiceResourceApplier,
        config: Optional[ModelCouplerConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._applier = applier
        self._config = config or ModelCouplerConfig()
        self._clock = clock

    @property
    def kind(self) -> str:
        return KIND_DEFERRED_RESOURCE

    async def reconcile(self, ref: ModelNamespacedName) -> ModelReconcileResult:
        try:
            raw = await self._client.get(
                API_VERSION, KIND_DEFERRED_RESOURCE, ref.name, ref.namespace
            )
        except ResourceNotFoundError:
            return ModelReconcileResult.done()
        deferred = ModelDeferredResource.model_validate(raw)

        try:
            return await self._reconcile(deferred)
        except ResourceConflictError:
            logger.debug(
                "DeferredResource changed during reconcile, requeueing",
                extra={"deferred_resource": str(ref)},
            )
            return ModelReconcileResult.requeue_now()
        except CouplerError as e:
            logger.warning(
                "DeferredResource reconcile failed",
                extra={
                    "deferred_resource": str(ref),
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
            )
            await self._write_failed(deferred, e)
            raise

    async def _reconcile(self, deferred: ModelDeferredResource) -> ModelReconcileResult:
        client = self._client_for(deferred)

        if deferred.is_deleting:
            if deferred.has_finalizer(DEFERRED_RESOURCE_FINALIZER):
                if deferred.spec.resource is not None:
                    await self._applier.delete(await self._manifest(deferred, client), client)
                deferred.remove_finalizer(DEFERRED_RESOURCE_FINALIZER)
                await self._client.update(deferred.to_manifest())
            return ModelReconcileResult.done()

        if deferred.add_finalizer(DEFERRED_RESOURCE_FINALIZER):
            deferred = ModelDeferredResource.model_validate(
                await self._client.update(deferred.to_manifest())
            )

        remaining = self._remaining_timeout(deferred)
        if remaining > 0:
            await self._write_resolved(
                deferred, EnumResolvedReason.PENDING, MESSAGE_WAITING_FOR_TIMEOUT
            )
            return ModelReconcileResult.requeue_in(remaining)

        for target in deferred.spec.wait_for:
            try:
                await client.get(
                    target.resolved_api_version(),
                    target.kind,
                    target.name,
                    target.namespace or deferred.namespace,
                )
            except ResourceNotFoundError:
                await self._write_resolved(
                    deferred, EnumResolvedReason.PENDING, MESSAGE_WAITING_FOR_RESOURCE
                )
                return ModelReconcileResult.requeue_in(self._config.pending_requeue_seconds)

        manifest = await self._manifest(deferred, client)
        api_version, kind, name, namespace = _identity(manifest)
        try:
            applied = await client.get(api_version, kind, name, namespace)
        except ResourceNotFoundError:
            await self._applier.apply(manifest, client)
            applied = await self._applier.get_with_retry(
                api_version, kind, name, namespace, client
            )

        metadata = applied.get("metadata") or {}
        assert isinstance(metadata, dict)
        deferred.status.owner_reference = ModelOwnerReference(
            api_version=str(applied.get("apiVersion", api_version)),
            kind=str(applied.get("kind", kind)),
            name=str(metadata.get("name", name)),
            uid=metadata.get("uid"),
        )
        await self._write_resolved(deferred, EnumResolvedReason.SUCCESS)
        logger.info(
            "DeferredResource resolved",
            extra={
                "deferred_resource": str(deferred.namespaced_name),
                "kind": kind,
                "name": name,
            },
        )
        return ModelReconcileResult.done()

    def _remaining_timeout(self, deferred: ModelDeferredResource) -> float:
        created = deferred.metadata.creation_timestamp
        if not deferred.spec.timeout or created is None:
            return 0.0
        elapsed = (self._clock() - created).total_seconds()
        return float(deferred.spec.timeout) - elapsed

    def _client_for(self, deferred: ModelDeferredResource) -> ProtocolClusterClient:
        account = deferred.spec.service_account_name
        if account and deferred.namespace:
            return self._client.for_service_account(deferred.namespace, account)
        return self._client

    async def _manifest(
        self,
        deferred: ModelDeferredResource,
        client: ProtocolClusterClient,
    ) -> dict[str, object]:
        """The manifest to apply, placed in the DeferredResource's namespace."""
        resource = deferred.spec.resource
        if not resource or not resource.get("apiVersion") or not resource.get("kind"):
            raise ProtocolConfigurationError(
                f"DeferredResource {deferred.namespaced_name} has no valid resource",
                context=ModelInfraErrorContext(
                    transport_type=EnumInfraTransportType.RUNTIME,
                    operation="deferred_resource_manifest",
                    target_name=str(deferred.namespaced_name),
                ),
            )
        manifest = copy.deepcopy(resource)
        metadata = manifest.setdefault("metadata", {})
        assert isinstance(metadata, dict)
        if deferred.namespace and await client.is_namespaced(
            str(manifest["apiVersion"]), str(manifest["kind"])
        ):
            metadata["namespace"] = deferred.namespace
        return manifest

    async def _write_resolved(
        self,
        deferred: ModelDeferredResource,
        reason: EnumResolvedReason,
        message: Optional[str] = None,
    ) -> None:
        status = (
            EnumConditionStatus.TRUE
            if reason is EnumResolvedReason.SUCCESS
            else EnumConditionStatus.FALSE
        )
        before = deferred.status.model_copy(deep=True)
        conditions = [
            c for c in deferred.status.conditions if c.type == EnumConditionType.RESOLVED.value
        ]
        set_condition(
            conditions,
            build_condition(
                EnumConditionType.RESOLVED.value,
                status,
                reason.value,
                message or reason.default_message,
                deferred.generation,
            ),
            deferred.generation,
            self._clock(),
        )
        deferred.status.conditions = conditions
        if deferred.status == before:
            return
        await self._client.update_status(deferred.to_manifest())

    async def _write_failed(self, deferred: ModelDeferredResource, error: Exception) -> None:
        try:
            deferred = ModelDeferredResource.model_validate(
                await self._client.get(
                    API_VERSION, KIND_DEFERRED_RESOURCE, deferred.name, deferred.namespace
                )
            )
        except ResourceNotFoundError:
            return
        set_condition(
            deferred.status.conditions,
            build_condition(
                EnumConditionType.FAILED.value,
                EnumConditionStatus.TRUE,
                EnumResolvedReason.ERROR.value,
                str(error) or type(error).__name__,
                deferred.generation,
            ),
            deferred.generation,
            self._clock(),
        )
        try:
            await self._client.update_status(deferred.to_manifest())
        except (ResourceConflictError, ResourceNotFoundError) as e:
            logger.warning(
                "Could not record DeferredResource failure",
                extra={"deferred_resource": str(deferred.namespaced_name), "error": str(e)},
            )


def _identity(manifest: dict[str, object]) -> tuple[str, str, str, Optional[str]]:
    metadata = manifest.get("metadata") or {}
    assert isinstance(metadata, dict)
    return (
        str(manifest["apiVersion"]),
        str(manifest["kind"]),
        str(metadata.get("name", "")),
        metadata.get("namespace"),
    )


__all__ = [
    "MESSAGE_WAITING_FOR_RESOURCE",
    "MESSAGE_WAITING_FOR_TIMEOUT",
    "ReconcilerDeferredResource",
]
