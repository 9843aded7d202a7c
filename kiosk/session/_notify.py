"""
Transient notifications.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from kiosk.session._types import Notification, NotificationKind
from kiosk.timer import DelayedSlot

logger = logging.getLogger(__name__)

NOTIFICATION_SECONDS = 3.0


class Notifier:
    """
    At most one visible notification, auto-dismissed after `duration`.

    A newer notification replaces the current one and restarts the dismiss
    timer; nothing is queued.

    Example:
        notifier = Notifier(on_change=toast.render)
        notifier.error("Payment failed.", "The card was declined.")
    """

    def __init__(
        self,
        *,
        duration: float = NOTIFICATION_SECONDS,
        on_change: Callable[[Notification | None], None] | None = None,
    ) -> None:
        self._duration = duration
        self._on_change = on_change
        self._dismiss = DelayedSlot("notification-dismiss")
        self._current: Notification | None = None

    @property
    def current(self) -> Notification | None:
        return self._current

    def show(self, kind: NotificationKind, message: str, detail: str | None = None) -> Notification:
        notification = Notification(kind, message, detail)
        logger.debug("notify %s: %s", kind.value, message)
        self._current = notification
        self._dismiss.schedule(self._duration, self.dismiss)
        self._emit()
        return notification

    def info(self, message: str, detail: str | None = None) -> Notification:
        return self.show(NotificationKind.INFO, message, detail)

    def success(self, message: str, detail: str | None = None) -> Notification:
        return self.show(NotificationKind.SUCCESS, message, detail)

    def error(self, message: str, detail: str | None = None) -> Notification:
        return self.show(NotificationKind.ERROR, message, detail)

    def dismiss(self) -> None:
        self._dismiss.cancel()
        if self._current is None:
            return
        self._current = None
        self._emit()

    def _emit(self) -> None:
        if self._on_change is not None:
            self._on_change(self._current)


__all__ = ("Notifier", "NOTIFICATION_SECONDS")
