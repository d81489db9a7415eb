# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Type-safe environment variable parsing.

Invalid values raise ProtocolConfigurationError naming the variable, so a
misconfigured deployment fails at startup instead of at first use.
"""

from __future__ import annotations

import os
from typing import Optional

from omnibase_coupler.enums import EnumInfraTransportType
from omnibase_coupler.errors import ModelInfraErrorContext, ProtocolConfigurationError


def _config_error(env_var: str, message: str) -> ProtocolConfigurationError:
    context = ModelInfraErrorContext(
        transport_type=EnumInfraTransportType.RUNTIME,
        operation="parse_env",
        target_name=env_var,
    )
    return ProtocolConfigurationError(message, context=context, env_var=env_var)


def parse_env_int(
    env_var: str,
    default: Optional[int] = None,
    *,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> Optional[int]:
    """Read ``env_var`` as an int, returning ``default`` when unset or empty."""
    raw = os.getenv(env_var)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise _config_error(
            env_var, f"{env_var} must be an integer, got {raw!r}"
        ) from e
    if min_value is not None and value < min_value:
        raise _config_error(env_var, f"{env_var} must be >= {min_value}, got {value}")
    if max_value is not None and value > max_value:
        raise _config_error(env_var, f"{env_var} must be <= {max_value}, got {value}")
    return value


def parse_env_float(
    env_var: str,
    default: Optional[float] = None,
    *,
    min_value: Optional[float] = None,
) -> Optional[float]:
    """Read ``env_var`` as a float, returning ``default`` when unset or empty."""
    raw = os.getenv(env_var)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw.strip())
    except ValueError as e:
        raise _config_error(env_var, f"{env_var} must be a number, got {raw!r}") from e
    if min_value is not None and value < min_value:
        raise _config_error(env_var, f"{env_var} must be >= {min_value}, got {value}")
    return value


def parse_env_str(env_var: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.getenv(env_var)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


__all__ = ["parse_env_float", "parse_env_int", "parse_env_str"]
