# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupler data models.

Cluster objects (Plug, Socket, Interface, DeferredResource) parse the
camelCase wire form and serialize back to it via ``to_manifest()``.
Runtime models (configuration, reconcile results, watch events) are
frozen value objects.
"""

from omnibase_coupler.models.model_condition import ModelCondition
from omnibase_coupler.models.model_coupler_config import (
    DEFAULT_POD_NAMESPACE,
    ModelCouplerConfig,
)
from omnibase_coupler.models.model_coupling_object import CouplingObject
from omnibase_coupler.models.model_coupling_spec import (
    ModelApparatus,
    ModelCouplingSpec,
)
from omnibase_coupler.models.model_deferred_resource import (
    ModelDeferredResource,
    ModelDeferredResourceSpec,
    ModelDeferredResourceStatus,
)
from omnibase_coupler.models.model_interface import (
    ModelInterface,
    ModelInterfaceSides,
    ModelInterfaceSpec,
    ModelSchemaProperty,
)
from omnibase_coupler.models.model_object_meta import (
    ModelClusterObject,
    ModelObjectMeta,
)
from omnibase_coupler.models.model_plug import (
    ModelCoupledResult,
    ModelPlug,
    ModelPlugSpec,
    ModelPlugStatus,
)
from omnibase_coupler.models.model_reconcile_result import ModelReconcileResult
from omnibase_coupler.models.model_references import (
    ModelCoupledReference,
    ModelNamespacedName,
    ModelObjectReference,
    ModelOwnerReference,
)
from omnibase_coupler.models.model_resource import (
    ModelResource,
    ModelResourceAction,
)
from omnibase_coupler.models.model_socket import (
    ModelSocket,
    ModelSocketSpec,
    ModelSocketStatus,
    ModelSocketValidation,
)
from omnibase_coupler.models.model_var import ModelFieldSelector, ModelVar
from omnibase_coupler.models.model_watch_event import ModelWatchEvent, WatchEventType
from omnibase_coupler.models.model_wire_base import ModelWireBase

__all__: list[str] = [
    "CouplingObject",
    "DEFAULT_POD_NAMESPACE",
    "ModelApparatus",
    "ModelClusterObject",
    "ModelCondition",
    "ModelCoupledReference",
    "ModelCoupledResult",
    "ModelCouplerConfig",
    "ModelCouplingSpec",
    "ModelDeferredResource",
    "ModelDeferredResourceSpec",
    "ModelDeferredResourceStatus",
    "ModelFieldSelector",
    "ModelInterface",
    "ModelInterfaceSides",
    "ModelInterfaceSpec",
    "ModelNamespacedName",
    "ModelObjectMeta",
    "ModelObjectReference",
    "ModelOwnerReference",
    "ModelPlug",
    "ModelPlugSpec",
    "ModelPlugStatus",
    "ModelReconcileResult",
    "ModelResource",
    "ModelResourceAction",
    "ModelSchemaProperty",
    "ModelSocket",
    "ModelSocketSpec",
    "ModelSocketStatus",
    "ModelSocketValidation",
    "ModelVar",
    "ModelWatchEvent",
    "ModelWireBase",
    "WatchEventType",
]
