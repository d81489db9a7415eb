# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Utility modules for the coupling engine.

This package provides common utilities used across the engine:
    - util_conditions: Generation-aware status condition upserts
    - util_endpoint: Apparatus endpoint normalisation
    - util_env_parsing: Type-safe environment variable parsing with validation
    - util_field_path: Dotted field path lookup and value formatting for Vars
"""

from omnibase_coupler.utils.util_conditions import (
    build_condition,
    find_condition,
    remove_condition,
    set_condition,
    utc_now,
)
from omnibase_coupler.utils.util_endpoint import join_endpoint, normalize_endpoint
from omnibase_coupler.utils.util_env_parsing import (
    parse_env_float,
    parse_env_int,
    parse_env_str,
)
from omnibase_coupler.utils.util_field_path import (
    format_field_value,
    lookup_field,
    split_field_path,
)

__all__: list[str] = [
    "build_condition",
    "find_condition",
    "format_field_value",
    "join_endpoint",
    "lookup_field",
    "normalize_endpoint",
    "parse_env_float",
    "parse_env_int",
    "parse_env_str",
    "remove_condition",
    "set_condition",
    "split_field_path",
    "utc_now",
]
