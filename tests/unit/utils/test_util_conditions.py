# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for generation-aware condition upserts."""

from __future__ import annotations

from datetime import UTC, datetime

from omnibase_coupler.enums import EnumConditionStatus
from omnibase_coupler.models import ModelCondition
from omnibase_coupler.utils import (
    build_condition,
    find_condition,
    remove_condition,
    set_condition,
)

NOW = datetime(2025, 1, 1, tzinfo=UTC)
LATER = datetime(2025, 1, 2, tzinfo=UTC)


def _joined(status: EnumConditionStatus, generation: int, reason: str = "PlugCreated") -> ModelCondition:
    return build_condition("Joined", status, reason, "message", generation)


class TestSetCondition:
    """Condition writes keep one entry per type and never go stale."""

    def test_appends_new_condition(self) -> None:
        conditions: list[ModelCondition] = []
        assert set_condition(conditions, _joined(EnumConditionStatus.FALSE, 1), 1, NOW)
        assert len(conditions) == 1
        assert conditions[0].last_transition_time == NOW

    def test_rejects_condition_from_older_generation(self) -> None:
        conditions: list[ModelCondition] = []
        assert set_condition(conditions, _joined(EnumConditionStatus.FALSE, 1), 2, NOW) is False
        assert conditions == []

    def test_does_not_overwrite_newer_condition(self) -> None:
        conditions: list[ModelCondition] = []
        set_condition(conditions, _joined(EnumConditionStatus.TRUE, 3), 3, NOW)
        assert set_condition(conditions, _joined(EnumConditionStatus.FALSE, 2), 2, LATER) is False
        assert conditions[0].status is EnumConditionStatus.TRUE

    def test_keeps_transition_time_when_status_unchanged(self) -> None:
        conditions: list[ModelCondition] = []
        set_condition(conditions, _joined(EnumConditionStatus.FALSE, 1), 1, NOW)
        changed = set_condition(
            conditions,
            _joined(EnumConditionStatus.FALSE, 1, reason="CouplingInProcess"),
            1,
            LATER,
        )
        assert changed is True
        assert conditions[0].reason == "CouplingInProcess"
        assert conditions[0].last_transition_time == NOW

    def test_moves_transition_time_on_status_change(self) -> None:
        conditions: list[ModelCondition] = []
        set_condition(conditions, _joined(EnumConditionStatus.FALSE, 1), 1, NOW)
        set_condition(conditions, _joined(EnumConditionStatus.TRUE, 1), 1, LATER)
        assert conditions[0].last_transition_time == LATER
        assert len(conditions) == 1

    def test_identical_write_reports_no_change(self) -> None:
        conditions: list[ModelCondition] = []
        set_condition(conditions, _joined(EnumConditionStatus.FALSE, 1), 1, NOW)
        assert set_condition(conditions, _joined(EnumConditionStatus.FALSE, 1), 1, LATER) is False


class TestFindAndRemove:
    def test_find_and_remove(self) -> None:
        conditions: list[ModelCondition] = []
        set_condition(conditions, _joined(EnumConditionStatus.FALSE, 1), 1, NOW)
        assert find_condition(conditions, "Joined") is not None
        assert find_condition(conditions, "Failed") is None
        assert remove_condition(conditions, "Joined") is True
        assert remove_condition(conditions, "Joined") is False
