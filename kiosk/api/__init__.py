"""
API — the order/payment backend over HTTP.

    from kiosk import api as A

    backend = A.OrderApi.create(settings.api_url, auth=auth)
    result = await backend.create_order(cart.lines)
"""

from __future__ import annotations

from kiosk.api._types import (
    OrderItem,
    CreatedOrder,
    PaymentRequestCreated,
    LoginResult,
    ErrorBody,
    ApiErrorKind,
    ApiError,
)
from kiosk.api._client import OrderApi, to_api_error, DEFAULT_READ_RETRY

__all__ = (
    "OrderItem",
    "CreatedOrder",
    "PaymentRequestCreated",
    "LoginResult",
    "ErrorBody",
    "ApiErrorKind",
    "ApiError",
    "OrderApi",
    "to_api_error",
    "DEFAULT_READ_RETRY",
)
