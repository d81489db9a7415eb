# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupler Errors Module.

Exports:
    ModelInfraErrorContext: Configuration model for bundled error context
    CouplerError: Base coupler error class
    ProtocolConfigurationError: Configuration validation errors
    InfraConnectionError: Transport connection errors
    InfraTimeoutError: Transport timeout errors
    InfraUnavailableError: Component not ready errors
    ResourceNotFoundError: Missing cluster object
    ResourceAlreadyExistsError: Create collided with existing object
    ResourceConflictError: Optimistic concurrency conflict
    InterfaceValidationError: Missing required Interface property
    InterfaceMismatchError: Plug and Socket disagree on Interface
    SocketAdmissionError: Socket refused the Plug
    ApparatusError: Apparatus webhook failure

Correlation IDs:
    Each reconcile pass generates one correlation ID (uuid4) and threads it
    through every error context it raises, so a failing pass can be traced
    across the cluster client, apparatus client and status writers.

    Example::

        context = ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.HTTP,
            operation="post_event",
            target_name="http://apparatus.default.svc/coupled",
            correlation_id=correlation_id,
        )
        raise ApparatusError("Apparatus unreachable", context=context) from e

Error Sanitization:
    Never put secret or config *values* in messages or context; property
    names, object names and endpoints are safe.
"""

from omnibase_coupler.errors.coupler_errors import (
    ApparatusError,
    CouplerError,
    InfraConnectionError,
    InfraTimeoutError,
    InfraUnavailableError,
    InterfaceMismatchError,
    InterfaceValidationError,
    ProtocolConfigurationError,
    ResourceAlreadyExistsError,
    ResourceConflictError,
    ResourceNotFoundError,
    SocketAdmissionError,
)
from omnibase_coupler.errors.model_infra_error_context import ModelInfraErrorContext

__all__: list[str] = [
    # Configuration model
    "ModelInfraErrorContext",
    # Error classes
    "CouplerError",
    "ProtocolConfigurationError",
    "InfraConnectionError",
    "InfraTimeoutError",
    "InfraUnavailableError",
    "ResourceNotFoundError",
    "ResourceAlreadyExistsError",
    "ResourceConflictError",
    "InterfaceValidationError",
    "InterfaceMismatchError",
    "SocketAdmissionError",
    "ApparatusError",
]
