# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Controller runtime for the coupling engine.

Only the engine-independent pieces are exported here. The reconcilers and
the kernel import the engine, which itself depends on ``KeyedLock``; import
them by module path (``omnibase_coupler.runtime.kernel``).
"""

from omnibase_coupler.runtime.controller import (
    Controller,
    fingerprint,
    object_key,
    parse_key,
)
from omnibase_coupler.runtime.keyed_lock import KeyedLock
from omnibase_coupler.runtime.work_queue import WorkQueue

__all__: list[str] = [
    "Controller",
    "KeyedLock",
    "WorkQueue",
    "fingerprint",
    "object_key",
    "parse_key",
]
