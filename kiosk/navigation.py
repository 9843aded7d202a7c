"""
Screen routes and the navigator the UI shell provides.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol


class Route(Enum):
    LOGIN = "/login"
    PRODUCTS = "/products"
    PAYMENT = "/payment"
    PAYMENT_COMPLETE = "/payment-complete"


class Navigator(Protocol):
    """Moves the UI to another screen. Implemented by the shell."""

    def navigate(self, route: Route) -> None:
        ...


class RecordingNavigator:
    """Navigator that only remembers where it was sent."""

    def __init__(self) -> None:
        self.history: list[Route] = []

    @property
    def current(self) -> Route | None:
        return self.history[-1] if self.history else None

    def navigate(self, route: Route) -> None:
        self.history.append(route)


__all__ = ("Route", "Navigator", "RecordingNavigator")
