"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable, Coroutine
from datetime import datetime, timedelta, timezone

from fastapi import FastAPI, Header
from fastapi.responses import JSONResponse

from kiosk.channel import ChannelClosed
from kiosk.navigation import Route


# Fake backend
def fake_backend(*, payment_seconds: int = 900) -> FastAPI:
    app = FastAPI()
    products = [
        {"id": 1, "name": "Iced Tea", "price": 1000, "status": "AVAILABLE", "stock": 10, "sortOrder": 1},
        {"id": 2, "name": "Cookie", "price": 500, "status": "AVAILABLE", "stock": 3, "sortOrder": 2},
        {"id": 3, "name": "Muffin", "price": 1500, "status": "SOLD_OUT", "stock": 0, "sortOrder": 3},
    ]
    ids = itertools.count(100)
    cancelled: set[int] = set()

    def expiry() -> str:
        return (datetime.now(timezone.utc) + timedelta(seconds=payment_seconds)).isoformat()

    @app.post("/kiosks/login")
    async def login(body: dict[str, str]):
        if body.get("password") != "secret":
            return JSONResponse({"code": "BOOTH_PASSWORD_NOT_MATCH"}, status_code=400)
        return {"accessToken": "tok-" + body["username"]}

    @app.get("/products/available")
    async def available(authorization: str | None = Header(default=None)):
        if authorization is None:
            return JSONResponse({"code": "UNAUTHORIZED"}, status_code=401)
        return products

    @app.post("/orders")
    async def create_order(body: dict[str, list[dict[str, int]]]):
        return {"id": next(ids)}

    @app.post("/orders/{order_id}/cancel")
    async def cancel(order_id: int):
        cancelled.add(order_id)
        return {}

    @app.post("/payments/qr")
    async def qr(body: dict[str, int]):
        if body["orderId"] in cancelled:
            return JSONResponse({"code": "ORDER_NOT_PENDING"}, status_code=409)
        request_id = next(ids)
        return {"id": request_id, "token": f"kiosk://pay/{request_id}", "expiresAt": expiry()}

    @app.post("/payments/student-id")
    async def student(body: dict[str, int | str]):
        if body["studentId"] == "1101":
            return JSONResponse({"code": "USER_NOT_FOUND"}, status_code=404)
        return {"id": next(ids), "expiresAt": expiry()}

    return app


# Scripted push channel
class ScriptedConnection:
    def __init__(self, frames: list[str], delay: float) -> None:
        self._frames = frames
        self._delay = delay
        self._closed = asyncio.Event()

    async def recv(self) -> str:
        if not self._frames:
            await self._closed.wait()
            raise ChannelClosed(clean=True)
        await asyncio.sleep(self._delay)
        frame = self._frames.pop(0)
        print(f"  ⇠ {frame}")
        return frame

    async def close(self) -> None:
        self._closed.set()


class ScriptedConnector:
    def __init__(self, *frames: str, delay: float = 0.3) -> None:
        self._frames = frames
        self._delay = delay

    async def __call__(self, url: str) -> ScriptedConnection:
        print(f"  ⇄ connect {url}")
        return ScriptedConnection(list(self._frames), self._delay)


class ConsoleNavigator:
    def __init__(self) -> None:
        self.current: Route | None = None

    def navigate(self, route: Route) -> None:
        self.current = route
        print(f"  → {route.value}")


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


async def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.05)


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
