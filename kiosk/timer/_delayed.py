"""
Cancellable delayed calls.

Every timer in the kiosk goes through a slot: scheduling into a slot that
already holds a pending call cancels that call first, so a purpose never has
two outstanding timers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Handle
# ═══════════════════════════════════════════════════════════════════════════════


class Delayed:
    """Handle to one scheduled call."""

    __slots__ = ("_handle", "_fired")

    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()

    @property
    def done(self) -> bool:
        return self._fired or self._handle.cancelled()

    def cancel(self) -> bool:
        """Cancel the call. Returns True if it had not run yet."""
        if self.done:
            return False
        self._handle.cancel()
        return True


def schedule(delay: float, fn: Callable[..., object], *args: object) -> Delayed:
    """
    Run fn(*args) on the running loop after `delay` seconds.

    Example:
        handle = schedule(3.0, notifier.dismiss)
        handle.cancel()
    """
    loop = asyncio.get_running_loop()
    holder: list[Delayed] = []

    def fire() -> None:
        holder[0]._fired = True
        fn(*args)

    delayed = Delayed(loop.call_later(max(0.0, delay), fire))
    holder.append(delayed)
    return delayed


# ═══════════════════════════════════════════════════════════════════════════════
# Slot — One Pending Call Per Purpose
# ═══════════════════════════════════════════════════════════════════════════════


class DelayedSlot:
    """
    Holds at most one pending delayed call.

    Example:
        reconnect = DelayedSlot("reconnect")
        reconnect.schedule(3.0, channel.reopen)
        reconnect.schedule(6.0, channel.reopen)  # first one is cancelled
    """

    __slots__ = ("name", "_current")

    def __init__(self, name: str) -> None:
        self.name = name
        self._current: Delayed | None = None

    @property
    def pending(self) -> bool:
        return self._current is not None and not self._current.done

    def schedule(self, delay: float, fn: Callable[..., object], *args: object) -> Delayed:
        if self.cancel():
            logger.debug("slot %s: replaced pending call", self.name)
        self._current = schedule(delay, fn, *args)
        return self._current

    def cancel(self) -> bool:
        current, self._current = self._current, None
        return current.cancel() if current is not None else False


__all__ = ("Delayed", "DelayedSlot", "schedule")
