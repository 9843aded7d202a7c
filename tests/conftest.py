import asyncio
import itertools
import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest
from fastapi import FastAPI, Header, Response
from fastapi.responses import JSONResponse
from kungfu import Ok, Error, LazyCoroResult

from kiosk.api import ApiError, PaymentRequestCreated
from kiosk.cart import Cart, CartStore, Order
from kiosk.channel import ChannelClosed, ReconnectPolicy
from kiosk.navigation import RecordingNavigator
from kiosk.session import Notifier, PaymentSession, SessionContext, SessionOptions

API_URL = "http://kiosk.test"


async def settle(rounds: int = 25) -> None:
    """Let scheduled callbacks and tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def wait_for(predicate, timeout: float = 2.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.005)


# ═══════════════════════════════════════════════════════════════════════════════
# In-memory push channel
# ═══════════════════════════════════════════════════════════════════════════════


class FakeConnection:
    def __init__(self, url: str) -> None:
        self.url = url
        self.closed = False
        self._inbox: asyncio.Queue[Any] = asyncio.Queue()

    def push(self, frame: dict | str) -> None:
        self._inbox.put_nowait(json.dumps(frame) if isinstance(frame, dict) else frame)

    def drop(self, clean: bool = False) -> None:
        self._inbox.put_nowait(ChannelClosed(clean=clean))

    async def recv(self) -> str:
        item = await self._inbox.get()
        if isinstance(item, ChannelClosed):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


class FakeConnector:
    def __init__(self) -> None:
        self.urls: list[str] = []
        self.connections: list[FakeConnection] = []
        self.failures = 0

    @property
    def latest(self) -> FakeConnection:
        return self.connections[-1]

    async def __call__(self, url: str) -> FakeConnection:
        self.urls.append(url)
        await asyncio.sleep(0)
        if self.failures:
            self.failures -= 1
            raise OSError("connection refused")
        conn = FakeConnection(url)
        self.connections.append(conn)
        return conn


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def fast_policy() -> ReconnectPolicy:
    return ReconnectPolicy().with_delays(base=0.01, maximum=0.02)


# ═══════════════════════════════════════════════════════════════════════════════
# Scriptable payment backend
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class Call:
    name: str
    args: tuple
    future: asyncio.Future = field(repr=False)

    def succeed(self, value: Any = None) -> None:
        self.future.set_result(Ok(value))

    def fail(self, error: ApiError) -> None:
        self.future.set_result(Error(error))


def created(request_id: str = "r1", token: str | None = "qr-r1", seconds: float = 900) -> PaymentRequestCreated:
    return PaymentRequestCreated(
        id=request_id,
        token=token,
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=seconds),
    )


class FakeBackend:
    """
    PaymentBackend double.

    Calls answer immediately unless their name is in `hold`; held calls wait
    for the test to resolve them. `errors` makes a call fail; `crash` makes
    it raise instead.
    """

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self.hold: set[str] = set()
        self.errors: dict[str, ApiError] = {}
        self.crash: set[str] = set()
        self.expires_in: float = 900
        self._ids = itertools.count(1)

    def named(self, name: str) -> list[Call]:
        return [c for c in self.calls if c.name == name]

    def _lazy(self, name: str, args: tuple, answer) -> LazyCoroResult:
        future = asyncio.get_running_loop().create_future()
        call = Call(name, args, future)
        self.calls.append(call)
        if name not in self.hold:
            error = self.errors.get(name)
            future.set_result(Error(error) if error is not None else Ok(answer()))

        async def run():
            if name in self.crash:
                raise RuntimeError(f"{name} blew up")
            return await future

        return LazyCoroResult(run)

    def create_code_payment(self, order_id):
        def answer():
            n = next(self._ids)
            return created(f"r{n}", f"qr-r{n}", self.expires_in)
        return self._lazy("create_code_payment", (order_id,), answer)

    def create_identifier_payment(self, order_id, student_id):
        def answer():
            return created(f"r{next(self._ids)}", None, self.expires_in)
        return self._lazy("create_identifier_payment", (order_id, student_id), answer)

    def cancel_order(self, order_id):
        return self._lazy("cancel_order", (order_id,), lambda: None)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


# ═══════════════════════════════════════════════════════════════════════════════
# Session wiring
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def cart_store() -> CartStore:
    cart = Cart().add_item(1, 1000, "Iced Tea").add_item(1, 1000).add_item(2, 500, "Cookie")
    return CartStore(cart.set_quantity(2, 3))


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier(duration=0.05)


@pytest.fixture
def ctx(backend, cart_store, navigator, notifier, connector) -> SessionContext:
    return SessionContext(
        backend=backend,
        cart=cart_store,
        navigator=navigator,
        notifier=notifier,
        connector=connector,
    )


@pytest.fixture
def options(fast_policy) -> SessionOptions:
    return SessionOptions(api_url=API_URL, reconnect=fast_policy, tick_seconds=0.01)


@pytest.fixture
def order(cart_store) -> Order:
    return Order.from_cart("7", cart_store.snapshot)


@pytest.fixture
async def session(ctx, order, options):
    payment = PaymentSession(ctx, order, options)
    yield payment
    payment.close()


# ═══════════════════════════════════════════════════════════════════════════════
# HTTP fake backend
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class ServerState:
    requests: list[tuple[str, str, Any, str | None]] = field(default_factory=list)
    stock: dict[int, int] = field(default_factory=lambda: {1: 10, 2: 3, 3: 0})
    cancelled: set[int] = field(default_factory=set)
    require_auth: bool = True


def build_app(state: ServerState) -> FastAPI:
    app = FastAPI()
    ids = itertools.count(100)

    def unauthorized(authorization: str | None) -> JSONResponse | None:
        if state.require_auth and authorization != "Bearer tok-booth-7":
            return JSONResponse({"code": "UNAUTHORIZED", "message": "bad token"}, status_code=401)
        return None

    @app.post("/kiosks/login")
    async def login(body: dict[str, str]):
        if body["username"] != "booth-7":
            return JSONResponse({"code": "BOOTH_NOT_FOUND"}, status_code=404)
        if body["password"] != "secret":
            return JSONResponse({"code": "BOOTH_PASSWORD_NOT_MATCH"}, status_code=400)
        return {"accessToken": "tok-booth-7"}

    @app.get("/products/available")
    async def products(authorization: str | None = Header(default=None)):
        if denied := unauthorized(authorization):
            return denied
        return [
            {"id": 2, "name": "Cookie", "price": 500, "status": "AVAILABLE", "stock": state.stock[2], "sortOrder": 2},
            {"id": 1, "name": "Iced Tea", "price": 1000, "status": "AVAILABLE", "stock": state.stock[1], "sortOrder": 1},
            {"id": 3, "name": "Muffin", "price": 1500, "status": "SOLD_OUT", "stock": state.stock[3], "sortOrder": 3},
            {"id": 4, "name": "Secret", "price": 1, "status": "HIDDEN", "stock": 1, "sortOrder": 0},
        ]

    @app.post("/orders")
    async def create_order(body: dict[str, list[dict[str, int]]], authorization: str | None = Header(default=None)):
        if denied := unauthorized(authorization):
            return denied
        for item in body["items"]:
            if item["quantity"] > state.stock.get(item["productId"], 0):
                return JSONResponse({"code": "INSUFFICIENT_STOCK"}, status_code=409)
        return {"id": next(ids)}

    @app.post("/orders/{order_id}/cancel")
    async def cancel(order_id: int, authorization: str | None = Header(default=None)):
        if denied := unauthorized(authorization):
            return denied
        state.cancelled.add(order_id)
        return Response(status_code=204)

    @app.post("/payments/qr")
    async def qr(body: dict[str, int], authorization: str | None = Header(default=None)):
        if denied := unauthorized(authorization):
            return denied
        if body["orderId"] in state.cancelled:
            return JSONResponse({"code": "ORDER_NOT_PENDING", "message": "not pending"}, status_code=409)
        request_id = next(ids)
        return {
            "id": request_id,
            "token": f"kiosk://pay/{request_id}",
            "expiresAt": "2030-01-01T00:00:00Z",
        }

    @app.post("/payments/student-id")
    async def student(body: dict[str, int | str], authorization: str | None = Header(default=None)):
        if denied := unauthorized(authorization):
            return denied
        if body["studentId"] == "1101":
            return JSONResponse({"code": "USER_NOT_FOUND"}, status_code=404)
        return {"id": next(ids)}

    return app


@pytest.fixture
def server() -> ServerState:
    return ServerState()


class RecordingTransport(httpx.AsyncBaseTransport):
    """ASGI transport that logs (method, path, json, authorization) per request."""

    def __init__(self, state: ServerState) -> None:
        self._state = state
        self._inner = httpx.ASGITransport(app=build_app(state))

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        body = request.content
        self._state.requests.append((
            request.method,
            request.url.path,
            json.loads(body) if body else None,
            request.headers.get("authorization"),
        ))
        return await self._inner.handle_async_request(request)


@pytest.fixture
def transport(server) -> RecordingTransport:
    return RecordingTransport(server)
