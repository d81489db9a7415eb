# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Var resolution: lift fields of other cluster objects into a string map."""

from __future__ import annotations

import logging
from typing import Optional

from omnibase_coupler.models import ModelVar
from omnibase_coupler.protocols import ProtocolClusterClient
from omnibase_coupler.utils import format_field_value, lookup_field

logger = logging.getLogger(__name__)


class ServiceVarResolver:
    """Fetches each Var's object and extracts its field path.

    Missing fields resolve to ``""``; a missing object raises
    ResourceNotFoundError from the cluster client.
    """

    def __init__(self, client: ProtocolClusterClient) -> None:
        self._client = client

    async def resolve(
        self,
        variables: list[ModelVar],
        namespace: Optional[str],
        client: Optional[ProtocolClusterClient] = None,
    ) -> dict[str, str]:
        """Resolve ``variables`` for an owner living in ``namespace``.

        Args:
            variables: Vars declared on the owner
            namespace: Owner namespace, used when an objref omits one
            client: Client to read with (service account scoped), defaults
                to the engine client
        """
        reader = client or self._client
        resolved: dict[str, str] = {}
        for var in variables:
            ref = var.objref
            obj = await reader.get(
                ref.resolved_api_version(),
                ref.kind,
                ref.name,
                ref.namespace or namespace,
            )
            resolved[var.name] = format_field_value(
                lookup_field(obj, var.fieldref.field_path)
            )
            logger.debug(
                "Resolved var",
                extra={"var": var.name, "kind": ref.kind, "name": ref.name},
            )
        return resolved


__all__ = ["ServiceVarResolver"]
