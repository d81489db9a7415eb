# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupler enumerations.

One enum per module; re-exported here for convenience.
"""

from omnibase_coupler.enums.enum_condition_status import EnumConditionStatus
from omnibase_coupler.enums.enum_condition_type import EnumConditionType
from omnibase_coupler.enums.enum_coupled_kind import EnumCoupledKind
from omnibase_coupler.enums.enum_coupler_error_code import EnumCouplerErrorCode
from omnibase_coupler.enums.enum_coupling_topic import EnumCouplingTopic
from omnibase_coupler.enums.enum_infra_transport_type import EnumInfraTransportType
from omnibase_coupler.enums.enum_joined_reason import EnumJoinedReason
from omnibase_coupler.enums.enum_phase import EnumPhase
from omnibase_coupler.enums.enum_resolved_reason import EnumResolvedReason
from omnibase_coupler.enums.enum_resource_do import EnumResourceDo
from omnibase_coupler.enums.enum_when import EnumWhen

__all__: list[str] = [
    "EnumConditionStatus",
    "EnumConditionType",
    "EnumCoupledKind",
    "EnumCouplerErrorCode",
    "EnumCouplingTopic",
    "EnumInfraTransportType",
    "EnumJoinedReason",
    "EnumPhase",
    "EnumResolvedReason",
    "EnumResourceDo",
    "EnumWhen",
]
