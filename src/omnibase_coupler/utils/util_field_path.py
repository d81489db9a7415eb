# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Field path lookup for Vars.

Paths are dotted with numeric list indices (``status.loadBalancer.ingress.0.ip``).
A leading ``.`` or ``$.`` and bracketed indices (``ingress[0]``) are accepted
so JSONPath-style paths copied from ``kubectl`` output keep working.
"""

from __future__ import annotations

import json
import re

_BRACKET_INDEX = re.compile(r"\[(\d+)\]")


def split_field_path(path: str) -> list[str]:
    normalized = path.strip()
    if normalized.startswith("$"):
        normalized = normalized[1:]
    normalized = _BRACKET_INDEX.sub(r".\1", normalized)
    return [segment for segment in normalized.split(".") if segment]


def lookup_field(obj: object, path: str) -> object:
    """Walk ``obj`` along ``path``; returns None when any segment is missing."""
    current = obj
    for segment in split_field_path(path):
        if isinstance(current, dict):
            if segment not in current:
                return None
            current = current[segment]
        elif isinstance(current, list):
            if not segment.isdigit():
                return None
            index = int(segment)
            if index >= len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def format_field_value(value: object) -> str:
    """Render a looked-up value as the string stored in config maps.

    None renders empty, booleans lower-case, numbers in JSON form and
    mappings or lists as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


__all__ = ["format_field_value", "lookup_field", "split_field_path"]
