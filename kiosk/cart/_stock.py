"""
Stock checks run by the caller before touching the cart.

The cart itself never looks at stock; these helpers compare a proposed
change against the stock figures the catalog reported.
"""

from __future__ import annotations

from typing import Protocol

from kiosk._types import Result, Ok, Error, ProductId
from kiosk.cart._types import Cart, CartError, CartErrorKind


class Stocked(Protocol):
    """Anything carrying catalog stock figures (see kiosk.catalog.Product)."""

    @property
    def id(self) -> ProductId: ...

    @property
    def stock(self) -> int: ...

    @property
    def is_sold_out(self) -> bool: ...


def _sold_out(product: Stocked) -> CartError:
    return CartError(CartErrorKind.SOLD_OUT, "This product is sold out.", product.id)


def _insufficient(product: Stocked) -> CartError:
    return CartError(
        CartErrorKind.INSUFFICIENT_STOCK,
        f"Only {product.stock} left in stock.",
        product.id,
    )


def check_add(cart: Cart, product: Stocked) -> Result[None, CartError]:
    """Can one more unit of `product` go into `cart`?"""
    if product.is_sold_out:
        return Error(_sold_out(product))
    if cart.quantity_of(product.id) >= product.stock:
        return Error(_insufficient(product))
    return Ok(None)


def check_quantity(product: Stocked | None, quantity: int) -> Result[None, CartError]:
    """Can the line for `product` be set to `quantity`? Removal always passes."""
    if quantity <= 0 or product is None:
        return Ok(None)
    if product.is_sold_out:
        return Error(_sold_out(product))
    if quantity > product.stock:
        return Error(_insufficient(product))
    return Ok(None)


__all__ = ("Stocked", "check_add", "check_quantity")
