"""
Push-channel types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol

from kiosk._types import PaymentStatus


class ChannelStatus(Enum):
    """Connection state shown on the kiosk's status indicator."""

    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()
    FAILED = auto()


@dataclass(frozen=True, slots=True)
class ChannelEvent:
    """One decoded status update pushed by the server."""

    status: PaymentStatus
    message: str | None = None


@dataclass(frozen=True, slots=True)
class FrameError:
    """Inbound frame that could not be decoded."""

    reason: str
    raw: str


# ═══════════════════════════════════════════════════════════════════════════════
# Transport Protocol — Swap In Tests
# ═══════════════════════════════════════════════════════════════════════════════


class ChannelClosed(Exception):
    """The underlying connection is gone."""

    def __init__(self, clean: bool, reason: str = "") -> None:
        super().__init__(reason or ("closed cleanly" if clean else "connection lost"))
        self.clean = clean


class Connection(Protocol):
    """
    One open duplex connection.

    recv() raises ChannelClosed when the peer goes away. clean=True means an
    orderly close (no reconnect); clean=False means the link dropped.
    """

    async def recv(self) -> str | bytes:
        ...

    async def close(self) -> None:
        ...


class Connector(Protocol):
    """Opens a Connection to a URL. Raising means the attempt failed uncleanly."""

    async def __call__(self, url: str) -> Connection:
        ...


__all__ = (
    "ChannelStatus",
    "ChannelEvent",
    "FrameError",
    "ChannelClosed",
    "Connection",
    "Connector",
)
