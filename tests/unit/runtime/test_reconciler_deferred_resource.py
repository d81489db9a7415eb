# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Tests for ReconcilerDeferredResource."""

from __future__ import annotations

from typing import Optional

import pytest

from omnibase_coupler.constants import API_VERSION, DEFERRED_RESOURCE_FINALIZER
from omnibase_coupler.errors import ProtocolConfigurationError
from omnibase_coupler.models import ModelCouplerConfig, ModelNamespacedName
from omnibase_coupler.runtime.reconciler_deferred_resource import (
    MESSAGE_WAITING_FOR_RESOURCE,
    MESSAGE_WAITING_FOR_TIMEOUT,
    ReconcilerDeferredResource,
)
from omnibase_coupler.services import ServiceResourceApplier, ServiceTemplateRenderer
from omnibase_coupler.testing import InMemoryClusterClient
from tests.helpers.coupling_builders import (
    condition,
    deferred_resource_manifest,
    secret_manifest,
    seed,
)
from tests.helpers.deterministic import DeterministicClock, no_sleep

REF = ModelNamespacedName(name="deferred", namespace="default")

CONFIG_MAP = {
    "apiVersion": "v1",
    "kind": "ConfigMap",
    "metadata": {"name": "settings"},
    "data": {"mode": "replica"},
}


class TestReconcilerDeferredResource:
    @pytest.fixture
    def reconciler(
        self,
        cluster: InMemoryClusterClient,
        coupler_config: ModelCouplerConfig,
        clock: DeterministicClock,
    ) -> ReconcilerDeferredResource:
        applier = ServiceResourceApplier(
            cluster,
            ServiceTemplateRenderer(),
            retry_attempts=3,
            retry_interval_seconds=0.0,
            sleep=no_sleep,
        )
        return ReconcilerDeferredResource(cluster, applier, coupler_config, clock=clock)

    async def _stored(self, cluster: InMemoryClusterClient) -> dict[str, object]:
        return await cluster.get(API_VERSION, "DeferredResource", "deferred", "default")

    async def _seed(
        self,
        cluster: InMemoryClusterClient,
        timeout: int = 0,
        resource: Optional[dict[str, object]] = None,
        wait_for: Optional[list[dict[str, object]]] = None,
    ) -> None:
        await seed(
            cluster,
            deferred_resource_manifest(
                timeout=timeout,
                resource=CONFIG_MAP if resource is None else resource,
                wait_for=wait_for,
            ),
        )

    @pytest.mark.asyncio
    async def test_waits_for_timeout(
        self,
        reconciler: ReconcilerDeferredResource,
        cluster: InMemoryClusterClient,
        clock: DeterministicClock,
    ) -> None:
        """Two seconds into a ten second timeout, the pass requeues for the rest."""
        await self._seed(cluster, timeout=10)
        clock.advance(2)

        result = await reconciler.reconcile(REF)

        assert result.requeue_after == pytest.approx(8.0)
        resolved = condition(await self._stored(cluster), "Resolved")
        assert resolved is not None
        assert resolved["status"] == "False"
        assert resolved["reason"] == "Pending"
        assert resolved["message"] == MESSAGE_WAITING_FOR_TIMEOUT
        assert not cluster.exists("v1", "ConfigMap", "settings", "default")

    @pytest.mark.asyncio
    async def test_applies_after_timeout(
        self,
        reconciler: ReconcilerDeferredResource,
        cluster: InMemoryClusterClient,
        clock: DeterministicClock,
    ) -> None:
        await self._seed(cluster, timeout=10)
        clock.advance(2)
        await reconciler.reconcile(REF)
        clock.advance(9)

        result = await reconciler.reconcile(REF)

        assert result.requeue is False
        applied = await cluster.get("v1", "ConfigMap", "settings", "default")
        stored = await self._stored(cluster)
        resolved = condition(stored, "Resolved")
        assert resolved is not None
        assert resolved["status"] == "True"
        assert resolved["reason"] == "Success"
        owner = stored["status"]["ownerReference"]  # type: ignore[index]
        assert owner["kind"] == "ConfigMap"
        assert owner["name"] == "settings"
        assert owner["uid"] == applied["metadata"]["uid"]  # type: ignore[index]
        assert DEFERRED_RESOURCE_FINALIZER in stored["metadata"]["finalizers"]  # type: ignore[index]

    @pytest.mark.asyncio
    async def test_waits_for_dependencies(
        self,
        reconciler: ReconcilerDeferredResource,
        cluster: InMemoryClusterClient,
    ) -> None:
        """A missing waitFor object holds the apply until it appears."""
        await self._seed(cluster, wait_for=[{"kind": "Secret", "name": "creds"}])

        result = await reconciler.reconcile(REF)

        assert result.requeue_after == 5.0
        resolved = condition(await self._stored(cluster), "Resolved")
        assert resolved is not None
        assert resolved["message"] == MESSAGE_WAITING_FOR_RESOURCE
        assert not cluster.exists("v1", "ConfigMap", "settings", "default")

        await seed(cluster, secret_manifest("creds", {"password": "s3cret"}))
        result = await reconciler.reconcile(REF)

        assert result.requeue is False
        assert cluster.exists("v1", "ConfigMap", "settings", "default")

    @pytest.mark.asyncio
    async def test_existing_object_is_not_reapplied(
        self,
        reconciler: ReconcilerDeferredResource,
        cluster: InMemoryClusterClient,
    ) -> None:
        await self._seed(cluster)
        await reconciler.reconcile(REF)

        await reconciler.reconcile(REF)

        assert cluster.count("apply", "ConfigMap") == 1

    @pytest.mark.asyncio
    async def test_deletion_removes_applied_object(
        self,
        reconciler: ReconcilerDeferredResource,
        cluster: InMemoryClusterClient,
    ) -> None:
        await self._seed(cluster)
        await reconciler.reconcile(REF)
        await cluster.delete(API_VERSION, "DeferredResource", "deferred", "default")

        result = await reconciler.reconcile(REF)

        assert result.requeue is False
        assert not cluster.exists("v1", "ConfigMap", "settings", "default")
        assert not cluster.exists(API_VERSION, "DeferredResource", "deferred", "default")

    @pytest.mark.asyncio
    async def test_deletion_tolerates_missing_object(
        self,
        reconciler: ReconcilerDeferredResource,
        cluster: InMemoryClusterClient,
    ) -> None:
        await self._seed(cluster)
        await reconciler.reconcile(REF)
        await cluster.delete("v1", "ConfigMap", "settings", "default")
        await cluster.delete(API_VERSION, "DeferredResource", "deferred", "default")

        await reconciler.reconcile(REF)

        assert not cluster.exists(API_VERSION, "DeferredResource", "deferred", "default")

    @pytest.mark.asyncio
    async def test_invalid_resource_records_failure(
        self,
        reconciler: ReconcilerDeferredResource,
        cluster: InMemoryClusterClient,
    ) -> None:
        """An unusable manifest adds Failed and propagates for backoff."""
        await self._seed(cluster, resource={"metadata": {"name": "settings"}})

        with pytest.raises(ProtocolConfigurationError, match="has no valid resource"):
            await reconciler.reconcile(REF)

        failed = condition(await self._stored(cluster), "Failed")
        assert failed is not None
        assert failed["status"] == "True"
        assert failed["reason"] == "Error"

    @pytest.mark.asyncio
    async def test_missing_object_is_done(
        self,
        reconciler: ReconcilerDeferredResource,
    ) -> None:
        result = await reconciler.reconcile(REF)

        assert result.requeue is False
