# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Coupler services.

Services:
    - ServiceTemplateRenderer: Jinja2 rendering of config and resource templates
    - ServiceVarResolver: Var field extraction from other cluster objects
    - ServiceConfigResolver: data/config/result merge and Interface validation
    - ServiceResourceApplier: lifecycle-gated apply/delete/recreate of manifests
"""

from omnibase_coupler.services.service_config_resolver import (
    SECTION_CONFIG,
    SECTION_RESULT,
    ServiceConfigResolver,
    validate_against_interface,
)
from omnibase_coupler.services.service_resource_applier import (
    ServiceResourceApplier,
    build_resource_context,
)
from omnibase_coupler.services.service_template_renderer import ServiceTemplateRenderer
from omnibase_coupler.services.service_var_resolver import ServiceVarResolver

__all__: list[str] = [
    "SECTION_CONFIG",
    "SECTION_RESULT",
    "ServiceConfigResolver",
    "ServiceResourceApplier",
    "ServiceTemplateRenderer",
    "ServiceVarResolver",
    "build_resource_context",
]
