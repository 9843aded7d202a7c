"""
Payment session types.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, auto

from kiosk._types import OrderId, PaymentStatus, RequestId
from kiosk.messages import ORDER_LEVEL_CODES

# ═══════════════════════════════════════════════════════════════════════════════
# Method
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentMethod(Enum):
    """How the customer pays. Values are the backend's method names."""

    CODE_SCAN = "QR_CODE"
    IDENTIFIER = "STUDENT_ID"


# ═══════════════════════════════════════════════════════════════════════════════
# Session State
# ═══════════════════════════════════════════════════════════════════════════════


class SessionState(Enum):
    """
    Where the payment screen is.

    NO_REQUEST: nothing outstanding (initial, after a method switch, or
                showing a creation error).
    AWAITING_METHOD_RESULT: a creation call is in flight.
    ACTIVE: request PENDING; channel open or reconnecting; deadline running.
    SUBMITTING_CANCEL: order cancellation in flight.
    COMPLETED / CANCELLED / EXPIRED / FAILED: terminal.
    """

    NO_REQUEST = auto()
    AWAITING_METHOD_RESULT = auto()
    ACTIVE = auto()
    SUBMITTING_CANCEL = auto()
    COMPLETED = auto()
    CANCELLED = auto()
    EXPIRED = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL

    @property
    def has_ended(self) -> bool:
        """Terminal with no way back. A FAILED payment leaves the order open."""
        return self in _TERMINAL and self is not SessionState.FAILED


_TERMINAL = frozenset({
    SessionState.COMPLETED,
    SessionState.CANCELLED,
    SessionState.EXPIRED,
    SessionState.FAILED,
})


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Request
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentRequest:
    """The one request the session is tracking for its order."""

    id: RequestId
    order_id: OrderId
    method: PaymentMethod
    token: str
    status: PaymentStatus
    expires_at: datetime

    def with_status(self, status: PaymentStatus) -> PaymentRequest:
        return replace(self, status=status)


# ═══════════════════════════════════════════════════════════════════════════════
# Creation Errors
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorAction(Enum):
    """The single way out of a failed creation."""

    RETRY = auto()
    BACK_TO_PRODUCTS = auto()


@dataclass(frozen=True, slots=True)
class RequestError:
    """A failed payment-request creation, as shown to the customer."""

    message: str
    code: str | None = None

    @property
    def action(self) -> ErrorAction:
        if self.code in ORDER_LEVEL_CODES:
            return ErrorAction.BACK_TO_PRODUCTS
        return ErrorAction.RETRY


# ═══════════════════════════════════════════════════════════════════════════════
# Notifications
# ═══════════════════════════════════════════════════════════════════════════════


class NotificationKind(Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notification:
    kind: NotificationKind
    message: str
    detail: str | None = None


__all__ = (
    "PaymentMethod",
    "SessionState",
    "PaymentRequest",
    "ErrorAction",
    "RequestError",
    "NotificationKind",
    "Notification",
)
