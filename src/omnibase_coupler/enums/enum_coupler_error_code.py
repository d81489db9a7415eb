# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupler Error Code Enumeration."""

from enum import Enum


class EnumCouplerErrorCode(str, Enum):
    """Error codes attached to every CouplerError.

    Attributes:
        OPERATION_FAILED: Generic failure (default)
        INVALID_CONFIGURATION: Configuration parsing or validation failure
        RESOURCE_NOT_FOUND: Referenced cluster object does not exist
        RESOURCE_ALREADY_EXISTS: Create collided with an existing object
        RESOURCE_CONFLICT: Optimistic concurrency (resourceVersion) conflict
        VALIDATION_ERROR: Interface or admission validation failure
        CONNECTION_ERROR: Transport could not reach its target
        TIMEOUT_ERROR: Transport exceeded its deadline
        SERVICE_UNAVAILABLE: Target answered but refused the request
    """

    OPERATION_FAILED = "OPERATION_FAILED"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_ALREADY_EXISTS = "RESOURCE_ALREADY_EXISTS"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


__all__ = ["EnumCouplerErrorCode"]
