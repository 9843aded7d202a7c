"""
Order backend wire models and errors.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from kiosk.messages import SERVER_TIMEOUT, message_for


class _Wire(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        frozen=True,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class OrderItem(_Wire):
    product_id: int
    quantity: int


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class CreatedOrder(_Wire):
    id: str


class PaymentRequestCreated(_Wire):
    """
    Response of both payment-creation endpoints.

    `token` is the QR payload for code-scan requests and may be absent for
    identifier requests. `expires_at` may be absent; callers apply a default.
    """

    id: str
    token: str | None = None
    expires_at: datetime | None = None


class LoginResult(_Wire):
    access_token: str


class ErrorBody(_Wire):
    code: str | None = None
    message: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class ApiErrorKind(Enum):
    """API error kinds."""
    HTTP = auto()
    UNAUTHORIZED = auto()
    TIMEOUT = auto()
    TRANSPORT = auto()
    DECODE = auto()


@dataclass(frozen=True, slots=True)
class ApiError:
    """A failed backend call. `code` is the server's error code, if it sent one."""

    kind: ApiErrorKind
    message: str
    code: str | None = None
    status: int | None = None

    @property
    def is_transient(self) -> bool:
        return self.kind in (ApiErrorKind.TIMEOUT, ApiErrorKind.TRANSPORT)

    def user_message(self, table: Mapping[str, str], fallback: str) -> str:
        """Customer-facing text: the table entry for `code`, else `fallback`."""
        if self.kind is ApiErrorKind.TIMEOUT:
            return SERVER_TIMEOUT
        return message_for(table, self.code, fallback)


__all__ = (
    "OrderItem",
    "CreatedOrder",
    "PaymentRequestCreated",
    "LoginResult",
    "ErrorBody",
    "ApiErrorKind",
    "ApiError",
)
