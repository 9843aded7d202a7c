"""
Kiosk — composition root the UI shell talks to.

Wires settings, the order API, the shared cart/notifier/navigator and the
catalog cache together, and hands out one PaymentSession per checkout.

    kiosk = Kiosk.from_settings(Settings.from_env(), navigator=shell)
    await kiosk.sign_in("booth-7", "secret")
    products = (await kiosk.products()).unwrap()
    kiosk.add_to_cart(products[0])
    match await kiosk.checkout():
        case Ok(payment):
            ...
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto

import httpx

from kiosk import messages as M
from kiosk._types import Result, Ok, Error, ProductId
from kiosk.api import ApiError, OrderApi
from kiosk.auth import AuthState
from kiosk.cart import Cart, CartError, CartStore, Order, check_add, check_quantity
from kiosk.catalog import Product, ReadThrough, TtlTier, visible
from kiosk.channel import Connector, WebSocketConnector
from kiosk.config import Settings
from kiosk.navigation import Navigator, Route
from kiosk.session import (
    Confirmation,
    Notifier,
    PaymentSession,
    SessionContext,
    SessionOptions,
)

logger = logging.getLogger(__name__)

PRODUCTS_KEY = "products:available"

# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutErrorKind(Enum):
    EMPTY_CART = auto()
    REJECTED = auto()


@dataclass(frozen=True, slots=True)
class CheckoutError:
    kind: CheckoutErrorKind
    message: str
    code: str | None = None


@dataclass(frozen=True, slots=True)
class LoginError:
    message: str
    code: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Kiosk
# ═══════════════════════════════════════════════════════════════════════════════


class Kiosk:
    def __init__(
        self,
        api: OrderApi,
        settings: Settings,
        navigator: Navigator,
        *,
        auth: AuthState | None = None,
        connector: Connector | None = None,
        notifier: Notifier | None = None,
        cart: CartStore | None = None,
    ) -> None:
        self._api = api
        self._settings = settings
        self._navigator = navigator
        self.auth = auth if auth is not None else AuthState()
        self.cart = cart if cart is not None else CartStore()
        self.notifier = notifier if notifier is not None else Notifier(
            duration=settings.notification_seconds,
        )
        self._catalog = ReadThrough(
            PRODUCTS_KEY,
            api.list_available_products,
            TtlTier[list[Product]](ttl=settings.catalog_ttl),
        )
        self._context = SessionContext(
            backend=api,
            cart=self.cart,
            navigator=navigator,
            notifier=self.notifier,
            connector=connector if connector is not None else WebSocketConnector(),
        )
        self._options = SessionOptions(
            api_url=settings.api_url,
            reconnect=settings.reconnect_policy(),
            default_ttl=settings.payment_ttl,
            tick_seconds=settings.tick_seconds,
            urgent_seconds=settings.urgent_seconds,
            pulse_seconds=settings.pulse_seconds,
        )
        self._session: PaymentSession | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        navigator: Navigator,
        *,
        connector: Connector | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Kiosk:
        auth = AuthState()
        kiosk: Kiosk | None = None

        def unauthorized() -> None:
            if kiosk is not None:
                kiosk.sign_out()

        api = OrderApi.create(
            settings.api_url,
            timeout=settings.http_timeout,
            auth=auth,
            on_unauthorized=unauthorized,
            transport=transport,
        )
        kiosk = cls(api, settings, navigator, auth=auth, connector=connector)
        return kiosk

    @property
    def context(self) -> SessionContext:
        return self._context

    @property
    def session(self) -> PaymentSession | None:
        return self._session

    async def aclose(self) -> None:
        self._close_session()
        await self._api.aclose()

    # ─────────────────────────────────────────────────────────────────────────
    # Sign-In
    # ─────────────────────────────────────────────────────────────────────────

    async def sign_in(self, username: str, password: str) -> Result[None, LoginError]:
        match await self._api.login(username, password):
            case Ok(result):
                self.auth.sign_in(result.access_token)
                self.cart.clear()
                await self._catalog.invalidate()
                self._navigator.navigate(Route.PRODUCTS)
                return Ok(None)
            case Error(e):
                message = e.user_message(M.LOGIN_ERRORS, M.LOGIN_FAILED)
                logger.warning("sign-in as %s failed: %s", username, e.code or e.kind.name)
                self.notifier.error(message)
                return Error(LoginError(message, e.code))

    def sign_out(self) -> None:
        self._close_session()
        self.auth.sign_out()
        self.cart.clear()
        self._navigator.navigate(Route.LOGIN)

    # ─────────────────────────────────────────────────────────────────────────
    # Catalog & Cart
    # ─────────────────────────────────────────────────────────────────────────

    async def products(self) -> Result[list[Product], ApiError]:
        """Products for the listing screen, served from cache while fresh."""
        match await self._catalog.get():
            case Ok(cached):
                return Ok(visible(cached.value))
            case Error(e):
                logger.warning("loading products failed: %s", e.message)
                return Error(e)

    def add_to_cart(self, product: Product) -> Result[Cart, CartError]:
        match check_add(self.cart.snapshot, product):
            case Ok(_):
                return Ok(self.cart.add_item(product.id, product.price, product.name))
            case Error(e):
                self.notifier.error(e.message)
                return Error(e)

    def update_quantity(
        self,
        product_id: ProductId,
        quantity: int,
        products: Iterable[Product],
    ) -> Result[Cart, CartError]:
        product = next((p for p in products if p.id == product_id), None)
        match check_quantity(product, quantity):
            case Ok(_):
                return Ok(self.cart.set_quantity(product_id, quantity))
            case Error(e):
                self.notifier.error(e.message)
                return Error(e)

    # ─────────────────────────────────────────────────────────────────────────
    # Checkout & Payment
    # ─────────────────────────────────────────────────────────────────────────

    async def checkout(self) -> Result[PaymentSession, CheckoutError]:
        """Place the order for the current cart and open its payment session."""
        cart = self.cart.snapshot
        if cart.is_empty:
            self.notifier.error(M.EMPTY_CART)
            return Error(CheckoutError(CheckoutErrorKind.EMPTY_CART, M.EMPTY_CART))

        match await self._api.create_order(cart.lines):
            case Ok(created):
                order = Order.from_cart(created.id, cart)
                logger.info("order %s placed: %d items, total %d", order.id, order.item_count(), order.total())
                session = self.start_payment(order)
                self._navigator.navigate(Route.PAYMENT)
                session.open()
                return Ok(session)
            case Error(e):
                message = e.user_message(M.ORDER_ERRORS, M.ORDER_FAILED)
                logger.warning("placing order failed: %s %s", e.code or e.kind.name, e.message)
                self.notifier.error(message)
                # Stock figures are probably stale
                await self._catalog.invalidate()
                return Error(CheckoutError(CheckoutErrorKind.REJECTED, message, e.code))

    def start_payment(self, order: Order) -> PaymentSession:
        """A fresh session for `order`. Any previous session is torn down first."""
        self._close_session()
        self._session = PaymentSession(self._context, order, self._options)
        return self._session

    def confirmation(self, order: Order | None = None) -> Confirmation:
        """Payment-complete screen for `order` (default: the current session's)."""
        if order is None and self._session is not None:
            order = self._session.order
        self._close_session()
        return Confirmation(self._context, order, auto_return=self._settings.confirmation_seconds)

    def _close_session(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None


__all__ = (
    "Kiosk",
    "CheckoutErrorKind",
    "CheckoutError",
    "LoginError",
    "PRODUCTS_KEY",
)
