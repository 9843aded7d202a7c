"""
Channel — server-pushed payment status over a reconnecting connection.

    from kiosk import channel as CH

    push = CH.PushChannel(
        api_url,
        connector=CH.WebSocketConnector(),
        on_event=handle,
        policy=CH.ReconnectPolicy().with_max_attempts(3),
    )
    push.connect(request_id)
"""

from __future__ import annotations

from kiosk.channel._types import (
    ChannelStatus,
    ChannelEvent,
    FrameError,
    ChannelClosed,
    Connection,
    Connector,
)
from kiosk.channel._policy import ReconnectPolicy
from kiosk.channel._codec import StatusFrame, decode_frame, channel_url, CHANNEL_PATH
from kiosk.channel._transport import WebSocketConnection, WebSocketConnector
from kiosk.channel._manager import PushChannel

__all__ = (
    "ChannelStatus",
    "ChannelEvent",
    "FrameError",
    "ChannelClosed",
    "Connection",
    "Connector",
    "ReconnectPolicy",
    "StatusFrame",
    "decode_frame",
    "channel_url",
    "CHANNEL_PATH",
    "WebSocketConnection",
    "WebSocketConnector",
    "PushChannel",
)
