"""
User-facing messages for server error codes.

Each operation has its own table and generic fallback; codes missing from
a table get the fallback.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

# ═══════════════════════════════════════════════════════════════════════════════
# Payment Requests
# ═══════════════════════════════════════════════════════════════════════════════

PAYMENT_ERRORS: Mapping[str, str] = MappingProxyType({
    "ORDER_NOT_FOUND": "The order could not be found.",
    "ORDER_NOT_PENDING": "This order can no longer be paid.",
    "USER_NOT_FOUND": "No student is registered with that ID.",
    "BOOTH_NOT_FOUND": "This booth could not be found.",
})

# Codes after which the order itself is unusable; retrying in place is pointless.
ORDER_LEVEL_CODES = frozenset({"ORDER_NOT_FOUND", "ORDER_NOT_PENDING"})

CODE_SCAN_FAILED = "Could not create the payment code."
IDENTIFIER_FAILED = "The payment request failed."
SERVER_TIMEOUT = "The server did not respond in time."
CANCEL_FAILED = "An error occurred while cancelling the order."

INVALID_IDENTIFIER = "Please enter a valid student ID."
IDENTIFIER_REQUESTED = "Payment requested."
IDENTIFIER_REQUESTED_DETAIL = "Approve the payment on your phone."
PAYMENT_FAILED = "Payment failed."
PAYMENT_FAILED_DETAIL = "The payment could not be processed."
PAYMENT_EXPIRED = "The payment time has expired."

# ═══════════════════════════════════════════════════════════════════════════════
# Order Placement
# ═══════════════════════════════════════════════════════════════════════════════

ORDER_ERRORS: Mapping[str, str] = MappingProxyType({
    "INSUFFICIENT_STOCK": "Some items are out of stock.",
    "PRODUCT_NOT_FOUND": "A product could not be found.",
    "PRODUCT_UNAVAILABLE": "A product is not available right now.",
})

ORDER_FAILED = "The order could not be placed."
EMPTY_CART = "Please select products."

# ═══════════════════════════════════════════════════════════════════════════════
# Sign-In
# ═══════════════════════════════════════════════════════════════════════════════

LOGIN_ERRORS: Mapping[str, str] = MappingProxyType({
    "BOOTH_NOT_FOUND": "This booth account does not exist.",
    "BOOTH_NOT_APPROVED": "This booth is waiting for approval.",
    "BOOTH_REJECTED": "This booth was rejected.",
    "BOOTH_INACTIVE": "This booth is inactive.",
    "BOOTH_PASSWORD_NOT_MATCH": "The password is incorrect.",
})

LOGIN_FAILED = "Sign-in failed."


def message_for(table: Mapping[str, str], code: str | None, fallback: str) -> str:
    """
    Look a code up in a table.

    Example:
        message_for(PAYMENT_ERRORS, "ORDER_NOT_PENDING", CODE_SCAN_FAILED)
        # "This order can no longer be paid."
    """
    if code is None:
        return fallback
    return table.get(code, fallback)


__all__ = (
    "PAYMENT_ERRORS",
    "ORDER_LEVEL_CODES",
    "CODE_SCAN_FAILED",
    "IDENTIFIER_FAILED",
    "SERVER_TIMEOUT",
    "CANCEL_FAILED",
    "INVALID_IDENTIFIER",
    "IDENTIFIER_REQUESTED",
    "IDENTIFIER_REQUESTED_DETAIL",
    "PAYMENT_FAILED",
    "PAYMENT_FAILED_DETAIL",
    "PAYMENT_EXPIRED",
    "ORDER_ERRORS",
    "ORDER_FAILED",
    "EMPTY_CART",
    "LOGIN_ERRORS",
    "LOGIN_FAILED",
    "message_for",
)
