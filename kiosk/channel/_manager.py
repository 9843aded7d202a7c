"""
Push-channel manager — one reconnecting connection per payment request.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from kiosk._types import Ok, Error, RequestId
from kiosk.channel._codec import channel_url, decode_frame
from kiosk.channel._policy import ReconnectPolicy
from kiosk.channel._types import (
    ChannelClosed,
    ChannelEvent,
    ChannelStatus,
    Connection,
    Connector,
)
from kiosk.timer import DelayedSlot

logger = logging.getLogger(__name__)

_LIVE = (ChannelStatus.CONNECTING, ChannelStatus.CONNECTED)


class PushChannel:
    """
    Owns the single push connection for the current payment request.

    DISCONNECTED → CONNECTING → CONNECTED. An unclean close goes back to
    DISCONNECTED with one reconnect scheduled, until the policy is exhausted
    and the channel parks in FAILED. A clean close or disconnect() never
    reconnects.

    Every connection attempt gets a generation number; anything a superseded
    attempt does after the fact is dropped.

    Example:
        channel = PushChannel(
            "https://api.example.com",
            connector=WebSocketConnector(),
            on_event=session.handle_event,
        )
        channel.connect("42")
        ...
        channel.disconnect()
    """

    def __init__(
        self,
        api_url: str,
        *,
        connector: Connector,
        on_event: Callable[[ChannelEvent], None],
        on_status: Callable[[ChannelStatus], None] | None = None,
        policy: ReconnectPolicy | None = None,
    ) -> None:
        self._api_url = api_url
        self._connector = connector
        self._on_event = on_event
        self._on_status = on_status
        self._policy = policy if policy is not None else ReconnectPolicy()
        self._reconnect = DelayedSlot("channel-reconnect")
        self._status = ChannelStatus.DISCONNECTED
        self._request_id: RequestId | None = None
        self._attempts = 0
        self._generation = 0
        self._task: asyncio.Task[None] | None = None

    # ─────────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def status(self) -> ChannelStatus:
        return self._status

    @property
    def request_id(self) -> RequestId | None:
        return self._request_id

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def policy(self) -> ReconnectPolicy:
        return self._policy

    # ─────────────────────────────────────────────────────────────────────────
    # Commands
    # ─────────────────────────────────────────────────────────────────────────

    def connect(self, request_id: RequestId | None) -> None:
        """Point the channel at a request. None is the same as disconnect()."""
        if request_id is None:
            self.disconnect()
            return
        if request_id == self._request_id and self._status in _LIVE:
            return
        if request_id != self._request_id:
            self._drop_connection()
            self._attempts = 0
            self._request_id = request_id
        self._open(request_id)

    def disconnect(self) -> None:
        """Close for good. No reconnect follows."""
        self._drop_connection()
        self._request_id = None
        self._attempts = 0
        self._set_status(ChannelStatus.DISCONNECTED)

    def reconnect(self) -> None:
        """Manual retry from the status indicator. Resets the attempt counter."""
        if self._request_id is None or self._status in _LIVE:
            return
        self._attempts = 0
        self._open(self._request_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _set_status(self, status: ChannelStatus) -> None:
        if status is self._status:
            return
        self._status = status
        if self._on_status is not None:
            self._on_status(status)

    def _drop_connection(self) -> None:
        self._generation += 1
        self._reconnect.cancel()
        task, self._task = self._task, None
        # A handler running inside the reader (on_event → disconnect) must not
        # cancel its own task; the reader notices the new generation instead.
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    def _open(self, request_id: RequestId) -> None:
        self._drop_connection()
        generation = self._generation
        url = channel_url(self._api_url, request_id)
        self._set_status(ChannelStatus.CONNECTING)
        logger.debug("channel: connecting to %s (attempt %d)", url, self._attempts)
        self._task = asyncio.get_running_loop().create_task(self._run(generation, url))

    def _reopen(self, generation: int) -> None:
        request_id = self._request_id
        if generation != self._generation or request_id is None:
            return
        self._open(request_id)

    def _lost(self, generation: int, reason: str) -> None:
        self._set_status(ChannelStatus.DISCONNECTED)
        if self._policy.exhausted(self._attempts):
            logger.warning(
                "channel: giving up after %d reconnect attempts (%s)",
                self._attempts,
                reason,
            )
            self._set_status(ChannelStatus.FAILED)
            return
        delay = self._policy.delay_for(self._attempts)
        self._attempts += 1
        logger.warning(
            "channel: connection lost (%s), reconnect %d/%d in %.1fs",
            reason,
            self._attempts,
            self._policy.max_attempts,
            delay,
        )
        self._reconnect.schedule(delay, self._reopen, generation)

    async def _run(self, generation: int, url: str) -> None:
        try:
            conn = await self._connector(url)
        except Exception as exc:
            if generation == self._generation:
                self._lost(generation, f"connect failed: {exc}")
            return

        try:
            if generation != self._generation:
                return
            self._attempts = 0
            self._set_status(ChannelStatus.CONNECTED)
            logger.info("channel: connected for request %s", self._request_id)
            await self._read(generation, conn)
        finally:
            await _close_quietly(conn)

    async def _read(self, generation: int, conn: Connection) -> None:
        while generation == self._generation:
            try:
                raw = await conn.recv()
            except ChannelClosed as exc:
                if generation != self._generation:
                    return
                if exc.clean:
                    logger.info("channel: closed by server")
                    self._set_status(ChannelStatus.DISCONNECTED)
                else:
                    self._lost(generation, str(exc))
                return
            except Exception as exc:
                if generation == self._generation:
                    self._lost(generation, f"receive failed: {exc}")
                return

            if generation != self._generation:
                return

            match decode_frame(raw):
                case Ok(event):
                    logger.debug("channel: event %s", event)
                    self._on_event(event)
                case Error(err):
                    logger.warning("channel: malformed frame (%s): %r", err.reason, err.raw)
                    self._lost(generation, "malformed frame")
                    return


async def _close_quietly(conn: Connection) -> None:
    try:
        await conn.close()
    except Exception:
        logger.debug("channel: error while closing connection", exc_info=True)


__all__ = ("PushChannel",)
