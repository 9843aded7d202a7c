"""
Timer — cancellable delayed calls and the payment deadline countdown.

    from kiosk import timer as T

    slot = T.DelayedSlot("dismiss")
    slot.schedule(3.0, notifier.dismiss)

    deadline = T.DeadlineTimer(on_expired=session.expire)
    deadline.start(900)
"""

from __future__ import annotations

from kiosk.timer._delayed import Delayed, DelayedSlot, schedule
from kiosk.timer._deadline import (
    DeadlineTimer,
    pulse,
    format_remaining,
    TICK_SECONDS,
    URGENT_SECONDS,
    PULSE_SECONDS,
)

__all__ = (
    "Delayed",
    "DelayedSlot",
    "schedule",
    "DeadlineTimer",
    "pulse",
    "format_remaining",
    "TICK_SECONDS",
    "URGENT_SECONDS",
    "PULSE_SECONDS",
)
