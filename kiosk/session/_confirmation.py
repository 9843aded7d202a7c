"""
Payment-complete screen model.
"""

from __future__ import annotations

import logging

from kiosk.cart import Order
from kiosk.navigation import Route
from kiosk.session._context import SessionContext
from kiosk.timer import DelayedSlot

logger = logging.getLogger(__name__)

AUTO_RETURN_SECONDS = 10.0


class Confirmation:
    """
    Shown after a completed payment.

    The cart is cleared here, not when the payment completes: the screen
    still shows what was bought. It returns to the product listing on its
    own after `auto_return` seconds.

    Example:
        screen = Confirmation(ctx, session.order)
        screen.open()
        ...
        screen.finish()  # "new order" button
    """

    def __init__(
        self,
        ctx: SessionContext,
        order: Order | None,
        *,
        auto_return: float = AUTO_RETURN_SECONDS,
    ) -> None:
        self._ctx = ctx
        self._order = order
        self._auto_return = auto_return
        self._slot = DelayedSlot("confirmation-return")
        self._done = False

    @property
    def order(self) -> Order | None:
        return self._order

    @property
    def total(self) -> int:
        return self._order.total() if self._order is not None else 0

    @property
    def is_done(self) -> bool:
        return self._done

    def open(self) -> None:
        if self._order is None:
            # Landed here without a paid order
            self._done = True
            self._ctx.navigator.navigate(Route.PRODUCTS)
            return
        self._slot.schedule(self._auto_return, self.finish)

    def finish(self) -> None:
        if self._done:
            return
        self._done = True
        self._slot.cancel()
        self._ctx.cart.clear()
        logger.info("order %s done, back to products", self._order.id if self._order else None)
        self._ctx.navigator.navigate(Route.PRODUCTS)

    def close(self) -> None:
        self._slot.cancel()


__all__ = ("Confirmation", "AUTO_RETURN_SECONDS")
