"""
Session — the payment screen's coordinator and its collaborators.

    from kiosk import session as S

    ctx = S.SessionContext(backend=api, cart=cart, navigator=nav, notifier=S.Notifier())
    payment = S.PaymentSession(ctx, order, S.SessionOptions(api_url=settings.api_url))
    payment.open()
"""

from __future__ import annotations

from kiosk.session._types import (
    PaymentMethod,
    SessionState,
    PaymentRequest,
    ErrorAction,
    RequestError,
    NotificationKind,
    Notification,
)
from kiosk.session._identifier import (
    IDENTIFIER_LENGTH,
    StudentCode,
    parse_identifier,
    is_valid_identifier,
    IdentifierInput,
)
from kiosk.session._notify import Notifier, NOTIFICATION_SECONDS
from kiosk.session._context import (
    PaymentBackend,
    SessionContext,
    SessionOptions,
    DEFAULT_PAYMENT_TTL,
)
from kiosk.session._coordinator import PaymentSession
from kiosk.session._confirmation import Confirmation, AUTO_RETURN_SECONDS

__all__ = (
    "PaymentMethod",
    "SessionState",
    "PaymentRequest",
    "ErrorAction",
    "RequestError",
    "NotificationKind",
    "Notification",
    "IDENTIFIER_LENGTH",
    "StudentCode",
    "parse_identifier",
    "is_valid_identifier",
    "IdentifierInput",
    "Notifier",
    "NOTIFICATION_SECONDS",
    "PaymentBackend",
    "SessionContext",
    "SessionOptions",
    "DEFAULT_PAYMENT_TTL",
    "PaymentSession",
    "Confirmation",
    "AUTO_RETURN_SECONDS",
)
