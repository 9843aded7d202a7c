"""
Session context — the collaborators a payment session is handed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Protocol

from kiosk._types import Lazy, OrderId
from kiosk.api import ApiError, PaymentRequestCreated
from kiosk.cart import CartStore
from kiosk.channel import Connector, ReconnectPolicy, WebSocketConnector
from kiosk.navigation import Navigator
from kiosk.session._notify import Notifier
from kiosk.timer import PULSE_SECONDS, TICK_SECONDS, URGENT_SECONDS

DEFAULT_PAYMENT_TTL = timedelta(minutes=15)


class PaymentBackend(Protocol):
    """The part of the order API a payment session needs. OrderApi satisfies it."""

    def create_code_payment(self, order_id: OrderId) -> Lazy[PaymentRequestCreated, ApiError]:
        ...

    def create_identifier_payment(
        self,
        order_id: OrderId,
        student_id: str,
    ) -> Lazy[PaymentRequestCreated, ApiError]:
        ...

    def cancel_order(self, order_id: OrderId) -> Lazy[None, ApiError]:
        ...


@dataclass(slots=True)
class SessionContext:
    """
    Shared kiosk state passed to each session explicitly.

    The session reads and clears the cart, steers navigation and posts
    notifications through these; it owns nothing here.
    """

    backend: PaymentBackend
    cart: CartStore
    navigator: Navigator
    notifier: Notifier
    connector: Connector = field(default_factory=WebSocketConnector)


@dataclass(frozen=True, slots=True)
class SessionOptions:
    """
    Tunables of one payment session.

    Example:
        SessionOptions(api_url="https://api.example.com")
    """

    api_url: str
    reconnect: ReconnectPolicy = ReconnectPolicy()
    default_ttl: timedelta = DEFAULT_PAYMENT_TTL
    tick_seconds: float = TICK_SECONDS
    urgent_seconds: int = URGENT_SECONDS
    pulse_seconds: float = PULSE_SECONDS


__all__ = (
    "PaymentBackend",
    "SessionContext",
    "SessionOptions",
    "DEFAULT_PAYMENT_TTL",
)
