# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupling lifecycle events carried on the event bus.

The set of events is closed: ``CouplingEvent`` is a discriminated union on
``topic``, so a consumer narrows with ``isinstance`` and never
inspects an untyped payload.

Example:
    >>> event = ModelCoupledEvent(
    ...     kind=EnumCoupledKind.PLUG,
    ...     plug=plug,
    ...     socket=socket,
    ...     plug_config={"user": "app"},
    ...     socket_config={"host": "10.0.0.5"},
    ... )
    >>> event.topic
    <EnumCouplingTopic.COUPLED: 'coupled'>
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from omnibase_coupler.enums import EnumCoupledKind, EnumCouplingTopic
from omnibase_coupler.models import ModelClusterObject, ModelPlug, ModelSocket


class ModelCouplingEventBase(BaseModel):
    """Fields shared by every coupling event.

    Attributes:
        kind: Which side the event concerns (plug or socket)
        correlation_id: Reconcile pass that produced the event
        plug: Plug snapshot, when known
        socket: Socket snapshot, when known
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: EnumCoupledKind
    correlation_id: UUID = Field(default_factory=uuid4)
    plug: Optional[ModelPlug] = None
    socket: Optional[ModelSocket] = None

    @property
    def owner(self) -> Optional[ModelClusterObject]:
        """The object whose handlers run for this event."""
        return self.plug if self.kind is EnumCoupledKind.PLUG else self.socket


class ModelCreatedEvent(ModelCouplingEventBase):
    topic: Literal[EnumCouplingTopic.CREATED] = EnumCouplingTopic.CREATED


class ModelCoupledEvent(ModelCouplingEventBase):
    topic: Literal[EnumCouplingTopic.COUPLED] = EnumCouplingTopic.COUPLED
    plug_config: dict[str, str] = Field(default_factory=dict)
    socket_config: dict[str, str] = Field(default_factory=dict)


class ModelUpdatedEvent(ModelCouplingEventBase):
    topic: Literal[EnumCouplingTopic.UPDATED] = EnumCouplingTopic.UPDATED
    plug_config: dict[str, str] = Field(default_factory=dict)
    socket_config: dict[str, str] = Field(default_factory=dict)


class ModelDecoupledEvent(ModelCouplingEventBase):
    topic: Literal[EnumCouplingTopic.DECOUPLED] = EnumCouplingTopic.DECOUPLED
    plug_config: Optional[dict[str, str]] = None
    socket_config: Optional[dict[str, str]] = None


class ModelDeletedEvent(ModelCouplingEventBase):
    topic: Literal[EnumCouplingTopic.DELETED] = EnumCouplingTopic.DELETED


class ModelBrokenEvent(ModelCouplingEventBase):
    topic: Literal[EnumCouplingTopic.BROKEN] = EnumCouplingTopic.BROKEN


CouplingEvent = Annotated[
    Union[
        ModelCreatedEvent,
        ModelCoupledEvent,
        ModelUpdatedEvent,
        ModelDecoupledEvent,
        ModelDeletedEvent,
        ModelBrokenEvent,
    ],
    Field(discriminator="topic"),
]


__all__ = [
    "CouplingEvent",
    "ModelBrokenEvent",
    "ModelCoupledEvent",
    "ModelCouplingEventBase",
    "ModelCreatedEvent",
    "ModelDecoupledEvent",
    "ModelDeletedEvent",
    "ModelUpdatedEvent",
]
