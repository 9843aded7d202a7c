"""
Cart types — immutable snapshots of selected items.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto

from kiosk._types import ProductId, OrderId

# ═══════════════════════════════════════════════════════════════════════════════
# Lines
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLine:
    product_id: ProductId
    unit_price: int
    quantity: int
    name: str = ""

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Snapshot
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Cart:
    """
    Immutable cart snapshot.

    Every mutation returns a new Cart; lines are never changed in place.

    Example:
        cart = Cart().add_item(1, 1000).add_item(1, 1000).add_item(2, 500)
        cart.total()       # 2500
        cart.item_count()  # 3
    """

    lines: tuple[CartLine, ...] = ()

    def add_item(self, product_id: ProductId, unit_price: int, name: str = "") -> Cart:
        """Increment the line for product_id, or append it with quantity 1."""
        for index, line in enumerate(self.lines):
            if line.product_id == product_id:
                bumped = replace(line, quantity=line.quantity + 1)
                return Cart((*self.lines[:index], bumped, *self.lines[index + 1 :]))
        return Cart((*self.lines, CartLine(product_id, unit_price, 1, name)))

    def set_quantity(self, product_id: ProductId, quantity: int) -> Cart:
        """Replace a line's quantity; n <= 0 removes the line. No stock check."""
        if quantity <= 0:
            return Cart(tuple(line for line in self.lines if line.product_id != product_id))
        return Cart(
            tuple(
                replace(line, quantity=quantity) if line.product_id == product_id else line
                for line in self.lines
            )
        )

    def clear(self) -> Cart:
        return Cart()

    def quantity_of(self, product_id: ProductId) -> int:
        for line in self.lines:
            if line.product_id == product_id:
                return line.quantity
        return 0

    def total(self) -> int:
        return sum(line.subtotal for line in self.lines)

    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines


# ═══════════════════════════════════════════════════════════════════════════════
# Order — Frozen At Checkout
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Order:
    """Server-acknowledged order. Created once per checkout, never mutated."""

    id: OrderId
    lines: tuple[CartLine, ...]

    @classmethod
    def from_cart(cls, order_id: OrderId, cart: Cart) -> Order:
        return cls(id=order_id, lines=cart.lines)

    def total(self) -> int:
        return sum(line.subtotal for line in self.lines)

    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CartErrorKind(Enum):
    """Cart error kinds."""
    SOLD_OUT = auto()
    INSUFFICIENT_STOCK = auto()


@dataclass(frozen=True, slots=True)
class CartError:
    """Stock check rejection."""
    kind: CartErrorKind
    message: str
    product_id: ProductId | None = None


__all__ = (
    "CartLine",
    "Cart",
    "Order",
    "CartErrorKind",
    "CartError",
)
