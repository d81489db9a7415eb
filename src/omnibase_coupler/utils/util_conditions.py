# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Status condition helpers.

``set_condition`` is the only way the engine writes a condition. It keeps
one entry per type and refuses writes computed from an older generation
than the object's current one, so a slow reconcile pass can never regress
a condition written by a newer pass.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Optional

from omnibase_coupler.enums import EnumConditionStatus
from omnibase_coupler.models import ModelCondition


def utc_now() -> datetime:
    """Current UTC time truncated to whole seconds (RFC 3339 on the wire)."""
    return datetime.now(UTC).replace(microsecond=0)


def find_condition(
    conditions: list[ModelCondition],
    condition_type: str,
) -> Optional[ModelCondition]:
    for condition in conditions:
        if condition.type == condition_type:
            return condition
    return None


def build_condition(
    condition_type: str,
    status: EnumConditionStatus,
    reason: str,
    message: str,
    generation: int,
) -> ModelCondition:
    return ModelCondition(
        type=condition_type,
        status=status,
        reason=reason,
        message=message,
        observed_generation=generation,
    )


def set_condition(
    conditions: list[ModelCondition],
    condition: ModelCondition,
    generation: int,
    now: Optional[datetime] = None,
) -> bool:
    """Upsert ``condition`` into ``conditions`` in place.

    Args:
        conditions: Condition list of the object, mutated in place.
        condition: New condition value.
        generation: Current ``metadata.generation`` of the object.
        now: Transition timestamp (defaults to the current UTC time).

    Returns:
        True when the list changed; False when the write was rejected as
        stale or was identical to the stored condition.
    """
    if condition.observed_generation < generation:
        return False

    existing = find_condition(conditions, condition.type)
    if existing is not None and existing.observed_generation > condition.observed_generation:
        return False

    transition_time = now or utc_now()
    if existing is not None and existing.status == condition.status:
        transition_time = existing.last_transition_time or transition_time

    updated = condition.model_copy(update={"last_transition_time": transition_time})
    if existing is None:
        conditions.append(updated)
        return True
    if existing == updated:
        return False
    conditions[conditions.index(existing)] = updated
    return True


def remove_condition(conditions: list[ModelCondition], condition_type: str) -> bool:
    existing = find_condition(conditions, condition_type)
    if existing is None:
        return False
    conditions.remove(existing)
    return True


__all__ = [
    "build_condition",
    "find_condition",
    "remove_condition",
    "set_condition",
    "utc_now",
]
