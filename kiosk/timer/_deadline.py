"""
Deadline timer — whole-second countdown with a one-shot expiry callback.
"""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime, timezone

from kiosk._types import Callback
from kiosk.timer._delayed import DelayedSlot

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0
URGENT_SECONDS = 60
PULSE_SECONDS = 0.5


class DeadlineTimer:
    """
    Countdown that fires `on_expired` exactly once when it reaches zero.

    The count decrements by one every `interval` seconds while running.
    `tick()` is public so a caller can also drive it by hand.

    Example:
        timer = DeadlineTimer(session.expire)
        timer.start_until(request.expires_at)
        ...
        timer.stop()
    """

    def __init__(
        self,
        on_expired: Callback,
        *,
        interval: float = TICK_SECONDS,
        urgent_below: int = URGENT_SECONDS,
    ) -> None:
        self._on_expired = on_expired
        self._interval = interval
        self._urgent_below = urgent_below
        self._slot = DelayedSlot("deadline-tick")
        self._remaining = 0
        self._running = False
        self._fired = False

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_urgent(self) -> bool:
        return self._running and self._remaining <= self._urgent_below

    def start(self, duration_seconds: float) -> None:
        """(Re)start the countdown. A zero duration expires on the next loop turn."""
        self._slot.cancel()
        self._remaining = max(0, math.ceil(duration_seconds))
        self._running = True
        self._fired = False
        if self._remaining == 0:
            self._slot.schedule(0, self._expire)
        else:
            self._slot.schedule(self._interval, self._on_interval)

    def start_until(self, expires_at: datetime, now: datetime | None = None) -> None:
        """Start from an absolute deadline."""
        if now is None:
            now = datetime.now(timezone.utc)
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        self.start((expires_at - now).total_seconds())

    def tick(self) -> None:
        if not self._running:
            return
        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            self._expire()

    def stop(self) -> None:
        self._running = False
        self._slot.cancel()

    def _on_interval(self) -> None:
        self.tick()
        if self._running:
            self._slot.schedule(self._interval, self._on_interval)

    def _expire(self) -> None:
        if self._fired:
            return
        self._fired = True
        self._running = False
        self._slot.cancel()
        logger.debug("deadline reached")
        self._on_expired()


def pulse(now: float | None = None, period: float = PULSE_SECONDS) -> bool:
    """On/off phase for the urgent-countdown blink. Presentational only."""
    if now is None:
        now = time.monotonic()
    return int(now / period) % 2 == 0


def format_remaining(seconds: int) -> str:
    """
    Render a countdown as MM:SS.

    Example:
        format_remaining(75)  # "01:15"
    """
    seconds = max(0, seconds)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


__all__ = (
    "DeadlineTimer",
    "pulse",
    "format_remaining",
    "TICK_SECONDS",
    "URGENT_SECONDS",
    "PULSE_SECONDS",
)
