# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for ServiceResourceApplier."""

from __future__ import annotations

import pytest

from omnibase_coupler.enums import EnumResourceDo, EnumWhen
from omnibase_coupler.errors import (
    InfraTimeoutError,
    ProtocolConfigurationError,
    ResourceNotFoundError,
)
from omnibase_coupler.models import ModelResource, ModelResourceAction
from omnibase_coupler.services import (
    ServiceResourceApplier,
    ServiceTemplateRenderer,
    build_resource_context,
)
from omnibase_coupler.testing import InMemoryClusterClient
from tests.helpers.coupling_builders import config_map_manifest, seed
from tests.helpers.deterministic import no_sleep

CONFIG_MAP_TEMPLATE: dict[str, object] = {
    "apiVersion": "v1",
    "kind": "ConfigMap",
    "metadata": {"name": "{{ plug.metadata.name }}-config"},
    "data": {"host": "{{ socketResult.host }}"},
}

CONTEXT = build_resource_context(
    plug={"metadata": {"name": "app", "namespace": "default"}},
    socket_result={"host": "10.0.0.5"},
)


def _resource(when: list[str], do: str = "apply", **fields: object) -> ModelResource:
    return ModelResource.model_validate({"when": when, "do": do, **fields})


class TestGetResources:
    """Lifecycle filtering of resource actions."""

    def test_filters_by_hook(self) -> None:
        coupled = _resource(["coupled"], template=CONFIG_MAP_TEMPLATE)
        created = _resource(["created"], template=CONFIG_MAP_TEMPLATE)
        selected = ServiceResourceApplier.get_resources([coupled, created], EnumWhen.COUPLED)
        assert selected == [coupled]

    def test_updated_is_synonym_for_changed(self) -> None:
        updated = _resource(["updated"], template=CONFIG_MAP_TEMPLATE)
        assert ServiceResourceApplier.get_resources([updated], EnumWhen.CHANGED) == [updated]
        assert ServiceResourceApplier.get_resources([updated], EnumWhen.UPDATED) == [updated]

    def test_retain_when_decoupled_skips_apply_only(self) -> None:
        """retainWhenDecoupled suppresses apply actions on decoupled."""
        retained = _resource(["decoupled"], retainWhenDecoupled=True, template=CONFIG_MAP_TEMPLATE)
        deleted = _resource(
            ["decoupled"], do="delete", retainWhenDecoupled=True, template=CONFIG_MAP_TEMPLATE
        )
        selected = ServiceResourceApplier.get_resources(
            [retained, deleted], EnumWhen.DECOUPLED
        )
        assert selected == [deleted]


class TestRenderManifests:
    """Template forms and manifest checks."""

    @pytest.fixture
    def applier(self, cluster: InMemoryClusterClient) -> ServiceResourceApplier:
        return ServiceResourceApplier(cluster, ServiceTemplateRenderer(), sleep=no_sleep)

    def test_structured_template(self, applier: ServiceResourceApplier) -> None:
        action = ModelResourceAction(template=CONFIG_MAP_TEMPLATE)
        [manifest] = applier.render_manifests(action, CONTEXT)
        assert manifest["metadata"] == {"name": "app-config"}
        assert manifest["data"] == {"host": "10.0.0.5"}

    def test_string_templates_are_multi_document_yaml(
        self, applier: ServiceResourceApplier
    ) -> None:
        action = ModelResourceAction(
            string_template=(
                "apiVersion: v1\n"
                "kind: ConfigMap\n"
                "metadata:\n"
                "  name: {{ plug.metadata.name }}-a\n"
                "---\n"
                "apiVersion: v1\n"
                "kind: ConfigMap\n"
                "metadata:\n"
                "  name: {{ plug.metadata.name }}-b\n"
            ),
        )
        names = [m["metadata"]["name"] for m in applier.render_manifests(action, CONTEXT)]
        assert names == ["app-a", "app-b"]

    def test_rejects_incomplete_manifest(self, applier: ServiceResourceApplier) -> None:
        action = ModelResourceAction(template={"kind": "ConfigMap", "metadata": {}})
        with pytest.raises(ProtocolConfigurationError, match="metadata.name"):
            applier.render_manifests(action, CONTEXT)

    def test_rejects_invalid_yaml(self, applier: ServiceResourceApplier) -> None:
        action = ModelResourceAction(string_template="kind: [unclosed")
        with pytest.raises(ProtocolConfigurationError, match="not valid YAML"):
            applier.render_manifests(action, CONTEXT)


class TestProcessResources:
    """apply, delete and recreate against the in-memory store."""

    @pytest.fixture
    def applier(self, cluster: InMemoryClusterClient) -> ServiceResourceApplier:
        return ServiceResourceApplier(
            cluster,
            ServiceTemplateRenderer(),
            retry_attempts=3,
            retry_interval_seconds=0.0,
            sleep=no_sleep,
        )

    @pytest.mark.asyncio
    async def test_apply_defaults_namespace(
        self, cluster: InMemoryClusterClient, applier: ServiceResourceApplier
    ) -> None:
        """Namespaced manifests land in the owner's namespace."""
        action = ModelResourceAction(template=CONFIG_MAP_TEMPLATE)

        await applier.process_resources([action], CONTEXT, namespace="team-a")

        stored = await cluster.get("v1", "ConfigMap", "app-config", "team-a")
        assert stored["data"] == {"host": "10.0.0.5"}

    @pytest.mark.asyncio
    async def test_cluster_scoped_kind_keeps_no_namespace(
        self, cluster: InMemoryClusterClient, applier: ServiceResourceApplier
    ) -> None:
        action = ModelResourceAction(
            template={"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": "tenant"}}
        )
        await applier.process_resources([action], CONTEXT, namespace="team-a")
        stored = await cluster.get("v1", "Namespace", "tenant")
        assert "namespace" not in stored["metadata"]

    @pytest.mark.asyncio
    async def test_delete_tolerates_missing(
        self, cluster: InMemoryClusterClient, applier: ServiceResourceApplier
    ) -> None:
        """Deleting an absent object is not an error."""
        action = ModelResourceAction(do=EnumResourceDo.DELETE, template=CONFIG_MAP_TEMPLATE)
        await applier.process_resources([action], CONTEXT, namespace="default")
        assert cluster.count("delete", "ConfigMap") == 1

    @pytest.mark.asyncio
    async def test_recreate_replaces_object(
        self, cluster: InMemoryClusterClient, applier: ServiceResourceApplier
    ) -> None:
        """recreate deletes then creates, yielding a new uid."""
        [original] = await seed(cluster, config_map_manifest("app-config", {"host": "old"}))
        action = ModelResourceAction(do=EnumResourceDo.RECREATE, template=CONFIG_MAP_TEMPLATE)

        await applier.process_resources([action], CONTEXT, namespace="default")

        stored = await cluster.get("v1", "ConfigMap", "app-config", "default")
        assert stored["data"] == {"host": "10.0.0.5"}
        assert stored["metadata"]["uid"] != original["metadata"]["uid"]

    @pytest.mark.asyncio
    async def test_recreate_times_out_when_object_lingers(
        self, cluster: InMemoryClusterClient, applier: ServiceResourceApplier
    ) -> None:
        """An object held by a finalizer is never gone; recreate gives up."""
        manifest = config_map_manifest("app-config", {"host": "old"})
        manifest["metadata"]["finalizers"] = ["example.com/hold"]  # type: ignore[index]
        await seed(cluster, manifest)
        action = ModelResourceAction(do=EnumResourceDo.RECREATE, template=CONFIG_MAP_TEMPLATE)

        with pytest.raises(InfraTimeoutError, match="still exists"):
            await applier.process_resources([action], CONTEXT, namespace="default")

    @pytest.mark.asyncio
    async def test_first_failure_propagates(
        self, cluster: InMemoryClusterClient, applier: ServiceResourceApplier
    ) -> None:
        """A failing action stops the remaining ones."""
        cluster.inject_failure("apply", ResourceNotFoundError("CRD not installed"))
        first = ModelResourceAction(template=CONFIG_MAP_TEMPLATE)
        second = ModelResourceAction(
            template={"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": "second"}}
        )

        with pytest.raises(ResourceNotFoundError):
            await applier.process_resources([first, second], CONTEXT, namespace="default")
        assert cluster.count("apply") == 1


class TestGetWithRetry:
    @pytest.mark.asyncio
    async def test_retries_until_visible(self, cluster: InMemoryClusterClient) -> None:
        """A transient not-found is retried."""
        sleeps: list[float] = []

        async def record_sleep(seconds: float) -> None:
            sleeps.append(seconds)

        await seed(cluster, config_map_manifest("app-config", {}))
        cluster.inject_failure("get", ResourceNotFoundError("not yet"))
        applier = ServiceResourceApplier(
            cluster,
            ServiceTemplateRenderer(),
            retry_attempts=3,
            retry_interval_seconds=2.0,
            sleep=record_sleep,
        )

        obj = await applier.get_with_retry("v1", "ConfigMap", "app-config", "default")

        assert obj["metadata"]["name"] == "app-config"
        assert sleeps == [2.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_budget(self, cluster: InMemoryClusterClient) -> None:
        applier = ServiceResourceApplier(
            cluster, ServiceTemplateRenderer(), retry_attempts=2, sleep=no_sleep
        )
        with pytest.raises(ResourceNotFoundError):
            await applier.get_with_retry("v1", "ConfigMap", "absent", "default")
        assert cluster.count("get") == 2
