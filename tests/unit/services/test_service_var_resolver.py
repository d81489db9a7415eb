# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for ServiceVarResolver."""

from __future__ import annotations

from typing import Optional

import pytest

from omnibase_coupler.errors import ResourceNotFoundError
from omnibase_coupler.models import ModelVar
from omnibase_coupler.services import ServiceVarResolver
from omnibase_coupler.testing import InMemoryClusterClient
from tests.helpers.coupling_builders import seed

SERVICE = {
    "apiVersion": "v1",
    "kind": "Service",
    "metadata": {"name": "postgres", "namespace": "databases"},
    "spec": {"clusterIP": "10.0.0.5", "ports": [{"port": 5432}]},
}


def _var(name: str, field_path: str, namespace: Optional[str] = None) -> ModelVar:
    objref: dict[str, object] = {"kind": "Service", "name": "postgres"}
    if namespace is not None:
        objref["namespace"] = namespace
    return ModelVar.model_validate(
        {"name": name, "objref": objref, "fieldref": {"fieldPath": field_path}}
    )


class TestServiceVarResolver:
    """Vars lift fields from other objects into strings."""

    @pytest.mark.asyncio
    async def test_resolves_fields_as_strings(self, cluster: InMemoryClusterClient) -> None:
        """Scalar and nested fields are formatted as strings."""
        await seed(cluster, SERVICE)
        resolver = ServiceVarResolver(cluster)

        resolved = await resolver.resolve(
            [
                _var("ip", "spec.clusterIP", "databases"),
                _var("port", "spec.ports[0].port", "databases"),
                _var("missing", "status.loadBalancer.ingress.0.ip", "databases"),
            ],
            namespace="default",
        )

        assert resolved == {"ip": "10.0.0.5", "port": "5432", "missing": ""}

    @pytest.mark.asyncio
    async def test_objref_namespace_defaults_to_owner(
        self, cluster: InMemoryClusterClient
    ) -> None:
        """An objref without namespace is read from the owner's namespace."""
        await seed(cluster, SERVICE)
        resolver = ServiceVarResolver(cluster)

        resolved = await resolver.resolve([_var("ip", "spec.clusterIP")], "databases")
        assert resolved == {"ip": "10.0.0.5"}

    @pytest.mark.asyncio
    async def test_missing_object_raises(self, cluster: InMemoryClusterClient) -> None:
        """A Var whose object does not exist fails resolution."""
        resolver = ServiceVarResolver(cluster)
        with pytest.raises(ResourceNotFoundError):
            await resolver.resolve([_var("ip", "spec.clusterIP")], "default")

    @pytest.mark.asyncio
    async def test_explicit_client_is_used(self, cluster: InMemoryClusterClient) -> None:
        """A service-account client passed in replaces the engine client."""
        other = InMemoryClusterClient()
        await seed(other, SERVICE)
        resolver = ServiceVarResolver(cluster)

        resolved = await resolver.resolve(
            [_var("ip", "spec.clusterIP", "databases")], "default", client=other
        )
        assert resolved == {"ip": "10.0.0.5"}
        assert cluster.count("get") == 0
