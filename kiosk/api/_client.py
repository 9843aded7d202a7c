"""
Order backend client — httpx calls lifted into Results.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

import httpx
from pydantic import TypeAdapter
from combinators import flow, lift as L, RetryPolicy

from kiosk._types import Lazy, Callback, OrderId
from kiosk.api._types import (
    ApiError,
    ApiErrorKind,
    CreatedOrder,
    ErrorBody,
    LoginResult,
    OrderItem,
    PaymentRequestCreated,
)
from kiosk.auth import AuthState
from kiosk.cart import CartLine
from kiosk.catalog import Product
from kiosk.messages import SERVER_TIMEOUT

logger = logging.getLogger(__name__)

_PRODUCTS = TypeAdapter(list[Product])


def _transient(error: ApiError) -> bool:
    return error.is_transient


DEFAULT_READ_RETRY: RetryPolicy[ApiError] = RetryPolicy.exponential(
    times=3,
    initial=1.0,
    max_delay=4.0,
    retry_on=_transient,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Error Mapping
# ═══════════════════════════════════════════════════════════════════════════════


def _error_body(response: httpx.Response) -> ErrorBody:
    try:
        data = response.json()
    except ValueError:
        return ErrorBody()
    if not isinstance(data, dict):
        return ErrorBody()
    return ErrorBody.model_validate(data)


def to_api_error(exc: Exception) -> ApiError:
    """Map an httpx/pydantic exception to ApiError. Anything else propagates."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        body = _error_body(exc.response)
        kind = ApiErrorKind.UNAUTHORIZED if status == 401 else ApiErrorKind.HTTP
        return ApiError(kind, body.message or f"HTTP {status}", body.code, status)
    if isinstance(exc, httpx.TimeoutException):
        return ApiError(ApiErrorKind.TIMEOUT, SERVER_TIMEOUT)
    if isinstance(exc, httpx.RequestError):
        return ApiError(ApiErrorKind.TRANSPORT, str(exc) or type(exc).__name__)
    if isinstance(exc, ValueError):
        return ApiError(ApiErrorKind.DECODE, f"unexpected response: {exc}")
    raise exc


# ═══════════════════════════════════════════════════════════════════════════════
# Client
# ═══════════════════════════════════════════════════════════════════════════════


class OrderApi:
    """
    Kiosk-facing order/payment backend.

    Every call returns a lazy Result; nothing runs until awaited.

    Example:
        api = OrderApi.create("https://api.example.com", auth=auth)

        match await api.create_code_payment(order.id):
            case Ok(created):
                ...
            case Error(e):
                print(e.code, e.message)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        auth: AuthState | None = None,
        on_unauthorized: Callback | None = None,
        read_retry: RetryPolicy[ApiError] = DEFAULT_READ_RETRY,
    ) -> None:
        self._client = client
        self._auth = auth if auth is not None else AuthState()
        self._on_unauthorized = on_unauthorized
        self._read_retry = read_retry

    @classmethod
    def create(
        cls,
        base_url: str,
        *,
        timeout: float = 10.0,
        auth: AuthState | None = None,
        on_unauthorized: Callback | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> OrderApi:
        client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        return cls(client, auth=auth, on_unauthorized=on_unauthorized)

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    async def aclose(self) -> None:
        await self._client.aclose()

    # ─────────────────────────────────────────────────────────────────────────
    # Endpoints
    # ─────────────────────────────────────────────────────────────────────────

    def login(self, username: str, password: str) -> Lazy[LoginResult, ApiError]:
        return self._call(
            "POST",
            "/kiosks/login",
            LoginResult.model_validate,
            json={"username": username, "password": password},
            signed=False,
        )

    def list_available_products(self) -> Lazy[list[Product], ApiError]:
        return (
            flow(self._call("GET", "/products/available", _PRODUCTS.validate_python))
            .retry(policy=self._read_retry)
            .compile()
        )

    def create_order(self, lines: Iterable[CartLine]) -> Lazy[CreatedOrder, ApiError]:
        items = [
            OrderItem(product_id=line.product_id, quantity=line.quantity).model_dump(by_alias=True)
            for line in lines
        ]
        return self._call("POST", "/orders", CreatedOrder.model_validate, json={"items": items})

    def cancel_order(self, order_id: OrderId) -> Lazy[None, ApiError]:
        return self._call("POST", f"/orders/{order_id}/cancel", _ignore)

    def create_code_payment(self, order_id: OrderId) -> Lazy[PaymentRequestCreated, ApiError]:
        return self._call(
            "POST",
            "/payments/qr",
            PaymentRequestCreated.model_validate,
            json={"orderId": _wire_id(order_id)},
        )

    def create_identifier_payment(
        self,
        order_id: OrderId,
        student_id: str,
    ) -> Lazy[PaymentRequestCreated, ApiError]:
        return self._call(
            "POST",
            "/payments/student-id",
            PaymentRequestCreated.model_validate,
            json={"orderId": _wire_id(order_id), "studentId": student_id},
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Plumbing
    # ─────────────────────────────────────────────────────────────────────────

    def _call[T](
        self,
        method: str,
        path: str,
        parse: Callable[[Any], T],
        *,
        json: Any = None,
        signed: bool = True,
    ) -> Lazy[T, ApiError]:
        async def send() -> T:
            headers = self._auth.headers() if signed else {}
            response = await self._client.request(method, path, json=json, headers=headers)
            logger.debug("%s %s -> %d", method, path, response.status_code)
            if response.status_code == 401 and signed:
                logger.warning("%s %s rejected the booth token", method, path)
                self._auth.sign_out()
                if self._on_unauthorized is not None:
                    self._on_unauthorized()
            response.raise_for_status()
            return parse(response.json() if response.content else None)

        return L.catching_async(send, on_error=to_api_error)


def _ignore(_: Any) -> None:
    return None


def _wire_id(order_id: OrderId) -> int | str:
    return int(order_id) if order_id.isdigit() else order_id


__all__ = ("OrderApi", "to_api_error", "DEFAULT_READ_RETRY")
