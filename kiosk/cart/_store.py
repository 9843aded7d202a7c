"""
Cart store — the session-context holder of the current cart snapshot.
"""

from __future__ import annotations

from collections.abc import Callable

from kiosk._types import ProductId
from kiosk.cart._types import Cart


class CartStore:
    """
    Mutable reference to an immutable Cart.

    Swapping the snapshot is the only mutation; readers holding an older
    snapshot keep seeing it unchanged.
    """

    def __init__(
        self,
        cart: Cart | None = None,
        *,
        on_change: Callable[[Cart], None] | None = None,
    ) -> None:
        self._cart = cart if cart is not None else Cart()
        self._on_change = on_change

    @property
    def snapshot(self) -> Cart:
        return self._cart

    def replace(self, cart: Cart) -> Cart:
        self._cart = cart
        if self._on_change is not None:
            self._on_change(cart)
        return cart

    def add_item(self, product_id: ProductId, unit_price: int, name: str = "") -> Cart:
        return self.replace(self._cart.add_item(product_id, unit_price, name))

    def set_quantity(self, product_id: ProductId, quantity: int) -> Cart:
        return self.replace(self._cart.set_quantity(product_id, quantity))

    def clear(self) -> Cart:
        return self.replace(self._cart.clear())


__all__ = ("CartStore",)
