# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Apparatus endpoint normalisation."""

from __future__ import annotations


def normalize_endpoint(endpoint: str) -> str:
    """Default the scheme to ``http://`` and drop trailing slashes.

    Example:
        >>> normalize_endpoint("apparatus.default.svc:8080/")
        'http://apparatus.default.svc:8080'
    """
    value = endpoint.strip()
    if "://" not in value:
        value = f"http://{value}"
    return value.rstrip("/")


def join_endpoint(endpoint: str, path: str) -> str:
    return f"{normalize_endpoint(endpoint)}/{path.lstrip('/')}"


__all__ = ["join_endpoint", "normalize_endpoint"]
