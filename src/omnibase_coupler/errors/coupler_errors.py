# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupler Error Classes.

Error Hierarchy:
    CouplerError (base)
    ├── ProtocolConfigurationError
    ├── InfraConnectionError
    │   └── ApparatusError
    ├── InfraTimeoutError
    ├── InfraUnavailableError
    ├── ResourceNotFoundError
    ├── ResourceAlreadyExistsError
    ├── ResourceConflictError
    ├── InterfaceValidationError
    ├── InterfaceMismatchError
    └── SocketAdmissionError

All errors:
    - Carry an EnumCouplerErrorCode for classification
    - Support proper error chaining with ``raise ... from e``
    - Accept ModelInfraErrorContext for bundled context parameters
    - Carry a correlation ID for tracing a reconcile pass

Reconcilers branch on the error *type* (for example ResourceConflictError
means "requeue", ResourceNotFoundError on a socket means "pending"); they
never inspect message text.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from omnibase_coupler.enums import EnumCouplerErrorCode
from omnibase_coupler.errors.model_infra_error_context import ModelInfraErrorContext


class CouplerError(Exception):
    """Base error class for coupler errors.

    Structured Fields (via ModelInfraErrorContext):
        transport_type: Type of transport (http, kubernetes, runtime)
        operation: Operation being performed
        correlation_id: Reconcile correlation ID
        target_name: Target object/endpoint name

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.KUBERNETES,
        ...     operation="update_status",
        ...     target_name="default/app",
        ... )
        >>> raise CouplerError("Operation failed", context=context, attempt=2)
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[EnumCouplerErrorCode] = None,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        """Initialize CouplerError with structured fields.

        Args:
            message: Human-readable error message
            error_code: Error code (defaults to OPERATION_FAILED)
            context: Bundled infrastructure context
            **extra_context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or EnumCouplerErrorCode.OPERATION_FAILED
        self.correlation_id: Optional[UUID] = None
        structured_context: dict[str, object] = dict(extra_context)
        if context is not None:
            if context.transport_type is not None:
                structured_context["transport_type"] = context.transport_type
            if context.operation is not None:
                structured_context["operation"] = context.operation
            if context.target_name is not None:
                structured_context["target_name"] = context.target_name
            self.correlation_id = context.correlation_id
        self.context = structured_context

    def __str__(self) -> str:
        return self.message


class ProtocolConfigurationError(CouplerError):
    """Raised when configuration parsing or validation fails.

    Example:
        >>> raise ProtocolConfigurationError(
        ...     "MAX_CONCURRENT_RECONCILES must be a positive integer",
        ...     context=context,
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumCouplerErrorCode.INVALID_CONFIGURATION,
            context=context,
            **extra_context,
        )


class InfraConnectionError(CouplerError):
    """Raised when a transport cannot reach its target.

    Used for cluster API transport errors and apparatus connection failures.
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumCouplerErrorCode.CONNECTION_ERROR,
            context=context,
            **extra_context,
        )


class InfraTimeoutError(CouplerError):
    """Raised when an operation exceeds its timeout."""

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumCouplerErrorCode.TIMEOUT_ERROR,
            context=context,
            **extra_context,
        )


class InfraUnavailableError(CouplerError):
    """Raised when a component is not ready to serve requests.

    Example:
        >>> raise InfraUnavailableError("Event bus not started", context=context)
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumCouplerErrorCode.SERVICE_UNAVAILABLE,
            context=context,
            **extra_context,
        )


class ResourceNotFoundError(CouplerError):
    """Raised when a referenced cluster object does not exist.

    Example:
        >>> raise ResourceNotFoundError(
        ...     "Socket default/db not found",
        ...     context=context,
        ...     kind="Socket",
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumCouplerErrorCode.RESOURCE_NOT_FOUND,
            context=context,
            **extra_context,
        )


class ResourceAlreadyExistsError(CouplerError):
    """Raised when a create collides with an existing object."""

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumCouplerErrorCode.RESOURCE_ALREADY_EXISTS,
            context=context,
            **extra_context,
        )


class ResourceConflictError(CouplerError):
    """Raised when a write is rejected for a stale resourceVersion.

    This is the optimistic-lock signal: the object changed since it was
    read. Reconcilers requeue instead of failing.
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumCouplerErrorCode.RESOURCE_CONFLICT,
            context=context,
            **extra_context,
        )


class InterfaceValidationError(CouplerError):
    """Raised when a resolved map lacks a property its Interface requires.

    Attributes:
        side: "plug" or "socket"
        section: "config" or "result"
        property_name: Name of the missing property

    Example:
        >>> raise InterfaceValidationError(side="socket", section="result", property_name="host")
        InterfaceValidationError: socket result property 'host' is required
    """

    def __init__(
        self,
        side: str,
        section: str,
        property_name: str,
        context: Optional[ModelInfraErrorContext] = None,
    ) -> None:
        self.side = side
        self.section = section
        self.property_name = property_name
        super().__init__(
            message=f"{side} {section} property '{property_name}' is required",
            error_code=EnumCouplerErrorCode.VALIDATION_ERROR,
            context=context,
            side=side,
            section=section,
            property_name=property_name,
        )


class InterfaceMismatchError(CouplerError):
    """Raised when a Plug and its Socket reference different Interfaces."""

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumCouplerErrorCode.VALIDATION_ERROR,
            context=context,
            **extra_context,
        )


class SocketAdmissionError(CouplerError):
    """Raised when a Socket refuses a Plug (namespace rules or limit)."""

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumCouplerErrorCode.VALIDATION_ERROR,
            context=context,
            **extra_context,
        )


class ApparatusError(InfraConnectionError):
    """Raised when an apparatus endpoint fails or answers non-2xx.

    Example:
        >>> raise ApparatusError(
        ...     "Apparatus returned HTTP 500 for event 'coupled'",
        ...     context=context,
        ...     status_code=500,
        ... )
    """


__all__ = [
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
