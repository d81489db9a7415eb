# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Error Context Configuration Model.

Bundles the common structured fields of coupler errors so error
constructors stay small while remaining strongly typed.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from omnibase_coupler.enums import EnumInfraTransportType


class ModelInfraErrorContext(BaseModel):
    """Structured context attached to coupler errors.

    Attributes:
        transport_type: Transport the failing operation used (HTTP, KUBERNETES, RUNTIME)
        operation: Operation being performed (get, apply, post_event, ...)
        target_name: Target object or endpoint name
        correlation_id: Reconcile pass correlation ID

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.KUBERNETES,
        ...     operation="get",
        ...     target_name="default/db",
        ...     correlation_id=uuid4(),
        ... )
        >>> raise ResourceNotFoundError("Socket not found", context=context)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    transport_type: Optional[EnumInfraTransportType] = Field(
        default=None,
        description="Type of transport (HTTP, KUBERNETES, RUNTIME)",
    )
    operation: Optional[str] = Field(
        default=None,
        description="Operation being performed (get, apply, post_event, etc.)",
    )
    target_name: Optional[str] = Field(
        default=None,
        description="Target object or endpoint name",
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Reconcile pass correlation ID for tracing",
    )

    @classmethod
    def with_correlation(
        cls,
        correlation_id: Optional[UUID] = None,
        **kwargs: object,
    ) -> ModelInfraErrorContext:
        """Build a context, generating a correlation ID when none is given."""
        return cls(correlation_id=correlation_id or uuid4(), **kwargs)  # type: ignore[arg-type]


__all__ = ["ModelInfraErrorContext"]
