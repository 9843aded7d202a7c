"""
Cart — immutable cart snapshots, the checkout order, and stock checks.

    from kiosk import cart as K

    store = K.CartStore()
    match K.check_add(store.snapshot, product):
        case Ok(_):
            store.add_item(product.id, product.price, product.name)
        case Error(e):
            notifier.error(e.message)
"""

from __future__ import annotations

from kiosk.cart._types import (
    CartLine,
    Cart,
    Order,
    CartErrorKind,
    CartError,
)
from kiosk.cart._store import CartStore
from kiosk.cart._stock import Stocked, check_add, check_quantity

__all__ = (
    "CartLine",
    "Cart",
    "Order",
    "CartErrorKind",
    "CartError",
    "CartStore",
    "Stocked",
    "check_add",
    "check_quantity",
)
