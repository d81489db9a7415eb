# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Joined Condition Reason Enumeration.

Reasons recorded on the ``Joined`` condition of Plugs and Sockets. The
reason string and its default message are part of the status surface
observed by users.
"""

from enum import Enum


class EnumJoinedReason(str, Enum):
    """Reasons for the ``Joined`` condition.

    Plug reasons:
        PLUG_CREATED, SOCKET_NOT_CREATED, SOCKET_NOT_READY,
        COUPLING_IN_PROCESS, COUPLING_SUCCEEDED

    Socket reasons:
        SOCKET_CREATED, SOCKET_READY, SOCKET_COUPLED, SOCKET_EMPTY

    Shared:
        ERROR
    """

    PLUG_CREATED = "PlugCreated"
    SOCKET_NOT_CREATED = "SocketNotCreated"
    SOCKET_NOT_READY = "SocketNotReady"
    COUPLING_IN_PROCESS = "CouplingInProcess"
    COUPLING_SUCCEEDED = "CouplingSucceeded"
    SOCKET_CREATED = "SocketCreated"
    SOCKET_READY = "SocketReady"
    SOCKET_COUPLED = "SocketCoupled"
    SOCKET_EMPTY = "SocketEmpty"
    ERROR = "Error"

    @property
    def default_message(self) -> str:
        """Message written when the caller supplies none."""
        return _DEFAULT_MESSAGES[self]


_DEFAULT_MESSAGES: dict[EnumJoinedReason, str] = {
    EnumJoinedReason.PLUG_CREATED: "plug created",
    EnumJoinedReason.SOCKET_NOT_CREATED: "waiting for socket to be created",
    EnumJoinedReason.SOCKET_NOT_READY: "waiting for socket to be ready",
    EnumJoinedReason.COUPLING_IN_PROCESS: "coupling to socket",
    EnumJoinedReason.COUPLING_SUCCEEDED: "coupling succeeded",
    EnumJoinedReason.SOCKET_CREATED: "socket created",
    EnumJoinedReason.SOCKET_READY: "socket ready",
    EnumJoinedReason.SOCKET_COUPLED: "plugs coupled",
    EnumJoinedReason.SOCKET_EMPTY: "0 plugs coupled",
    EnumJoinedReason.ERROR: "unknown error",
}


__all__ = ["EnumJoinedReason"]
