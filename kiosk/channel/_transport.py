"""
WebSocket transport for the push channel.
"""

from __future__ import annotations

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

from kiosk.channel._types import ChannelClosed


class WebSocketConnection:
    """Connection over a `websockets` client socket."""

    def __init__(self, ws: ClientConnection) -> None:
        self._ws = ws

    async def recv(self) -> str | bytes:
        try:
            return await self._ws.recv()
        except ConnectionClosedOK as exc:
            raise ChannelClosed(clean=True, reason=str(exc)) from exc
        except ConnectionClosedError as exc:
            raise ChannelClosed(clean=False, reason=str(exc)) from exc

    async def close(self) -> None:
        await self._ws.close()


class WebSocketConnector:
    """
    Default Connector.

    Example:
        channel = PushChannel(api_url, connector=WebSocketConnector(), on_event=...)
    """

    def __init__(self, *, open_timeout: float = 10.0) -> None:
        self._open_timeout = open_timeout

    async def __call__(self, url: str) -> WebSocketConnection:
        ws = await connect(url, open_timeout=self._open_timeout)
        return WebSocketConnection(ws)


__all__ = ("WebSocketConnection", "WebSocketConnector")
