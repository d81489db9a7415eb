# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Template rendering for config/result templates and resource manifests.

Templates are Jinja2 evaluated in a sandbox. Undefined names and missing
attributes render as empty strings (``{{ plug.status.missing.deep }}``
yields ``""``), matching how config templates treat absent fields.

Filters available on top of the Jinja2 builtins:
    - ``b64enc`` / ``b64dec``: base64 encode/decode a string
    - ``to_json``: compact JSON
"""

from __future__ import annotations

import base64
import binascii
import functools
import json
import logging

import jinja2
import jinja2.exceptions
from jinja2.sandbox import SandboxedEnvironment

from omnibase_coupler.enums import EnumInfraTransportType
from omnibase_coupler.errors import ModelInfraErrorContext, ProtocolConfigurationError

logger = logging.getLogger(__name__)

# Compiled templates kept per renderer, least recently used evicted first
TEMPLATE_CACHE_SIZE = 256


def _b64enc(value: object) -> str:
    return base64.b64encode(str(value).encode("utf-8")).decode("ascii")


def _b64dec(value: object) -> str:
    try:
        return base64.b64decode(str(value)).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise jinja2.exceptions.FilterArgumentError(f"b64dec: {e}") from e


def _to_json(value: object) -> str:
    return json.dumps(value, separators=(",", ":"), default=str)


class ServiceTemplateRenderer:
    """Renders strings, string maps and nested structures against a context."""

    def __init__(self) -> None:
        self._env = SandboxedEnvironment(
            undefined=jinja2.ChainableUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self._env.filters["b64enc"] = _b64enc
        self._env.filters["b64dec"] = _b64dec
        self._env.filters["to_json"] = _to_json
        self._compile = functools.lru_cache(maxsize=TEMPLATE_CACHE_SIZE)(
            self._env.from_string
        )

    def render_string(self, template: str, context: dict[str, object]) -> str:
        """Render one template string.

        Raises:
            ProtocolConfigurationError: The template does not compile or
                fails while rendering
        """
        if "{{" not in template and "{%" not in template:
            return template
        try:
            return self._compile(template).render(context)
        except jinja2.TemplateError as e:
            ctx = ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.RUNTIME,
                operation="render_template",
            )
            raise ProtocolConfigurationError(
                f"Template rendering failed: {e}", context=ctx
            ) from e

    def render_map(
        self,
        templates: dict[str, str],
        context: dict[str, object],
    ) -> dict[str, str]:
        return {
            key: self.render_string(value, context) for key, value in templates.items()
        }

    def render_structure(self, value: object, context: dict[str, object]) -> object:
        """Render every string (keys included) inside nested dicts and lists."""
        if isinstance(value, str):
            return self.render_string(value, context)
        if isinstance(value, dict):
            return {
                self.render_string(str(k), context): self.render_structure(v, context)
                for k, v in value.items()
            }
        if isinstance(value, list):
            return [self.render_structure(item, context) for item in value]
        return value


__all__ = ["TEMPLATE_CACHE_SIZE", "ServiceTemplateRenderer"]
