"""
Payment session — the coordinator behind the payment screen.

One session drives one order through at most one live payment request at a
time. It owns the deadline timer and the push channel for its lifetime;
the cart, navigator and notifier are borrowed from the SessionContext.

Every asynchronous completion (creation call, cancellation call) captures
the session generation when it starts and is dropped if the generation has
moved on by the time it lands. Method switches, retries, cancellation and
teardown all bump the generation.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from datetime import datetime, timezone
from typing import Any

from kiosk import messages as M
from kiosk._types import Ok, Error, OrderId, PaymentStatus, RequestId
from kiosk.api import ApiError, ApiErrorKind, PaymentRequestCreated
from kiosk.cart import Order
from kiosk.channel import ChannelEvent, ChannelStatus, PushChannel
from kiosk.navigation import Route
from kiosk.session._context import SessionContext, SessionOptions
from kiosk.session._identifier import IdentifierInput, is_valid_identifier
from kiosk.session._types import (
    ErrorAction,
    PaymentMethod,
    PaymentRequest,
    RequestError,
    SessionState,
)
from kiosk.timer import DeadlineTimer, pulse

logger = logging.getLogger(__name__)

_STATE_FOR = {
    PaymentStatus.COMPLETED: SessionState.COMPLETED,
    PaymentStatus.FAILED: SessionState.FAILED,
    PaymentStatus.EXPIRED: SessionState.EXPIRED,
    PaymentStatus.CANCELLED: SessionState.CANCELLED,
}


class PaymentSession:
    """
    Payment lifecycle for one order.

    Example:
        session = PaymentSession(ctx, order, SessionOptions(api_url=settings.api_url))
        session.open()                                  # code-scan request created
        session.select_method(PaymentMethod.IDENTIFIER)
        session.submit_identifier("2314")
        ...
        session.close()                                 # leaving the screen
    """

    def __init__(
        self,
        ctx: SessionContext,
        order: Order,
        options: SessionOptions,
        *,
        on_change: Callable[[PaymentSession], None] | None = None,
    ) -> None:
        self._ctx = ctx
        self._order = order
        self._options = options
        self._on_change = on_change

        self._generation = 0
        self._closed = False
        self._state = SessionState.NO_REQUEST
        self._method = PaymentMethod.CODE_SCAN
        self._request: PaymentRequest | None = None
        self._status: PaymentStatus | None = None
        self._error: RequestError | None = None
        self._creating: PaymentMethod | None = None
        self._cancel_started = False
        self._cancelling = False
        self._identifier = IdentifierInput()
        self._tasks: set[asyncio.Task[None]] = set()

        self._timer = DeadlineTimer(
            self._on_deadline,
            interval=options.tick_seconds,
            urgent_below=options.urgent_seconds,
        )
        self._channel = PushChannel(
            options.api_url,
            connector=ctx.connector,
            on_event=self._on_channel_event,
            on_status=self._on_channel_status,
            policy=options.reconnect,
        )

    # ═════════════════════════════════════════════════════════════════════════
    # Read-Only View
    # ═════════════════════════════════════════════════════════════════════════

    @property
    def order(self) -> Order:
        return self._order

    @property
    def order_id(self) -> OrderId:
        return self._order.id

    @property
    def request(self) -> PaymentRequest | None:
        return self._request

    @property
    def request_id(self) -> RequestId | None:
        return self._request.id if self._request is not None else None

    @property
    def request_code(self) -> str | None:
        """QR payload or submitted identifier of the current request."""
        return self._request.token if self._request is not None else None

    @property
    def remaining_seconds(self) -> int:
        return self._timer.remaining

    @property
    def is_urgent(self) -> bool:
        return self._timer.is_urgent

    def blink(self, now: float | None = None) -> bool:
        """Whether an urgent countdown is in its visible phase. Always on otherwise."""
        return not self.is_urgent or pulse(now, self._options.pulse_seconds)

    @property
    def is_active(self) -> bool:
        return self._state is SessionState.ACTIVE

    @property
    def status(self) -> PaymentStatus | None:
        return self._status

    @property
    def selected_method(self) -> PaymentMethod:
        return self._method

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def error(self) -> RequestError | None:
        return self._error

    @property
    def channel_status(self) -> ChannelStatus:
        return self._channel.status

    @property
    def identifier(self) -> IdentifierInput:
        return self._identifier

    @property
    def is_submitting(self) -> bool:
        return self._creating is not None or self._cancelling

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ═════════════════════════════════════════════════════════════════════════
    # Commands
    # ═════════════════════════════════════════════════════════════════════════

    def open(self) -> None:
        """Screen entry. Code-scan is preselected, so its request is created now."""
        if self._closed or self._state is not SessionState.NO_REQUEST or self._creating:
            return
        logger.info("payment session opened for order %s", self._order.id)
        if self._method is PaymentMethod.CODE_SCAN:
            self._create(PaymentMethod.CODE_SCAN)
        self._changed()

    def select_method(self, method: PaymentMethod) -> bool:
        """
        Switch payment method.

        Drops whatever the previous method had going (a pending creation
        included: its late result is ignored). Re-selecting the current
        method does nothing. Refused while cancelling and once the session
        has ended; a FAILED payment may switch to another method.
        """
        if self._closed or self._cancel_started or self._state.has_ended:
            return False
        if method is self._method:
            return False
        logger.info("payment method %s -> %s", self._method.name, method.name)
        self._supersede()
        self._method = method
        self._identifier.clear()
        self._error = None
        if method is PaymentMethod.CODE_SCAN:
            self._create(PaymentMethod.CODE_SCAN)
        self._changed()
        return True

    def submit_identifier(self, code: str | None = None) -> bool:
        """
        Request an identifier payment for `code` (default: the keypad buffer).

        Invalid codes never reach the network.
        """
        if self._closed or self._method is not PaymentMethod.IDENTIFIER:
            return False
        if self._state is not SessionState.NO_REQUEST or self._creating is not None:
            return False
        if self._error is not None and self._error.action is ErrorAction.BACK_TO_PRODUCTS:
            return False
        value = self._identifier.value if code is None else code
        if not is_valid_identifier(value):
            self._ctx.notifier.info(M.INVALID_IDENTIFIER)
            return False
        self._error = None
        self._create(PaymentMethod.IDENTIFIER, value)
        self._changed()
        return True

    def retry(self) -> bool:
        """
        Start over with a fresh request for the current method.

        Not offered for order-level errors; use back_to_products() there.
        """
        if self._closed or self._cancel_started or self._creating is not None:
            return False
        if self._state.has_ended:
            return False
        if self._error is not None and self._error.action is ErrorAction.BACK_TO_PRODUCTS:
            return False
        logger.info("retrying payment for order %s", self._order.id)
        self._supersede()
        self._error = None
        self._identifier.clear()
        if self._method is PaymentMethod.CODE_SCAN:
            self._create(PaymentMethod.CODE_SCAN)
        self._changed()
        return True

    def cancel(self) -> bool:
        """
        Cancel the order and leave for the product listing.

        Works mid-creation too. Cleanup happens even if the cancellation call
        fails. Refused once the payment has completed.
        """
        if self._closed or self._cancel_started or self._state is SessionState.COMPLETED:
            return False
        self._begin_cancel()
        self._changed()
        return True

    def reconnect(self) -> None:
        """Manual channel retry from the status indicator."""
        if self._closed or self._state is not SessionState.ACTIVE:
            return
        self._channel.reconnect()

    def back_to_products(self) -> None:
        """The exit offered for order-level creation errors."""
        if self._closed:
            return
        self.close()
        self._ctx.navigator.navigate(Route.PRODUCTS)

    def close(self) -> None:
        """
        Screen exit.

        Stops the deadline, closes the channel and abandons in-flight calls;
        whatever they return later is ignored.
        """
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        self._timer.stop()
        self._channel.disconnect()
        logger.info("payment session closed for order %s (%s)", self._order.id, self._state.name)

    async def wait_pending(self) -> None:
        """Wait for in-flight creation/cancellation calls to land."""
        while pending := [t for t in self._tasks if not t.done()]:
            await asyncio.gather(*pending, return_exceptions=True)

    # ═════════════════════════════════════════════════════════════════════════
    # Request Creation
    # ═════════════════════════════════════════════════════════════════════════

    def _create(self, method: PaymentMethod, identifier: str | None = None) -> None:
        self._creating = method
        self._state = SessionState.AWAITING_METHOD_RESULT
        self._spawn(self._run_create(self._generation, method, identifier))

    async def _run_create(
        self,
        generation: int,
        method: PaymentMethod,
        identifier: str | None,
    ) -> None:
        backend = self._ctx.backend
        try:
            if identifier is None:
                result = await backend.create_code_payment(self._order.id)
            else:
                result = await backend.create_identifier_payment(self._order.id, identifier)
        except Exception as exc:
            logger.exception("%s creation for order %s crashed", method.name, self._order.id)
            result = Error(ApiError(ApiErrorKind.TRANSPORT, str(exc)))

        if generation != self._generation:
            logger.debug("dropping stale %s creation result for order %s", method.name, self._order.id)
            return

        self._creating = None
        match result:
            case Ok(created):
                self._activate(method, created, identifier)
            case Error(e):
                self._creation_failed(method, e)
        self._changed()

    def _activate(
        self,
        method: PaymentMethod,
        created: PaymentRequestCreated,
        identifier: str | None,
    ) -> None:
        now = datetime.now(timezone.utc)
        expires_at = created.expires_at or now + self._options.default_ttl
        self._request = PaymentRequest(
            id=created.id,
            order_id=self._order.id,
            method=method,
            token=created.token or identifier or "",
            status=PaymentStatus.PENDING,
            expires_at=expires_at,
        )
        self._status = PaymentStatus.PENDING
        self._state = SessionState.ACTIVE
        logger.info(
            "payment request %s (%s) created for order %s",
            created.id,
            method.name,
            self._order.id,
        )
        self._timer.start_until(expires_at, now)
        self._channel.connect(created.id)
        if method is PaymentMethod.IDENTIFIER:
            self._ctx.notifier.success(M.IDENTIFIER_REQUESTED, M.IDENTIFIER_REQUESTED_DETAIL)

    def _creation_failed(self, method: PaymentMethod, error: ApiError) -> None:
        fallback = M.CODE_SCAN_FAILED if method is PaymentMethod.CODE_SCAN else M.IDENTIFIER_FAILED
        message = error.user_message(M.PAYMENT_ERRORS, fallback)
        self._error = RequestError(message=message, code=error.code)
        self._state = SessionState.NO_REQUEST
        logger.warning(
            "payment request (%s) for order %s failed: %s %s",
            method.name,
            self._order.id,
            error.code or error.kind.name,
            error.message,
        )
        self._ctx.notifier.error(message)

    def _supersede(self) -> None:
        self._generation += 1
        self._timer.stop()
        self._channel.disconnect()
        self._request = None
        self._status = None
        self._creating = None
        self._state = SessionState.NO_REQUEST

    # ═════════════════════════════════════════════════════════════════════════
    # Terminal Outcomes
    # ═════════════════════════════════════════════════════════════════════════

    def _on_channel_event(self, event: ChannelEvent) -> None:
        request = self._request
        if self._closed or request is None or self._state is not SessionState.ACTIVE:
            logger.debug("ignoring channel event %s in state %s", event.status.name, self._state.name)
            return
        if request.id != self._channel.request_id:
            logger.debug("ignoring channel event for superseded request")
            return

        match event.status:
            case PaymentStatus.PENDING:
                return
            case PaymentStatus.COMPLETED:
                self._finish(PaymentStatus.COMPLETED)
                self._ctx.navigator.navigate(Route.PAYMENT_COMPLETE)
            case PaymentStatus.FAILED:
                # The order stays open; the customer may retry with a new request.
                self._finish(PaymentStatus.FAILED)
                self._ctx.notifier.error(M.PAYMENT_FAILED, event.message or M.PAYMENT_FAILED_DETAIL)
            case PaymentStatus.EXPIRED:
                self._finish(PaymentStatus.EXPIRED)
                self._ctx.notifier.error(M.PAYMENT_EXPIRED)
                if not self._cancel_started:
                    self._begin_cancel()
        self._changed()

    def _on_channel_status(self, status: ChannelStatus) -> None:
        if not self._closed:
            self._changed()

    def _on_deadline(self) -> None:
        if self._closed or self._state is not SessionState.ACTIVE or self._cancel_started:
            return
        logger.info("payment request %s ran out of time", self.request_id)
        self._begin_cancel()
        self._changed()

    def _finish(self, status: PaymentStatus) -> None:
        self._timer.stop()
        self._channel.disconnect()
        if self._request is not None:
            self._request = self._request.with_status(status)
        self._status = status
        self._state = _STATE_FOR[status]
        logger.info("order %s payment ended: %s", self._order.id, status.name)

    # ═════════════════════════════════════════════════════════════════════════
    # Cancellation
    # ═════════════════════════════════════════════════════════════════════════

    def _begin_cancel(self) -> None:
        self._cancel_started = True
        self._cancelling = True
        self._generation += 1
        self._creating = None
        self._timer.stop()
        self._channel.disconnect()
        if not self._state.is_terminal:
            self._state = SessionState.SUBMITTING_CANCEL
        self._spawn(self._run_cancel(self._generation))

    async def _run_cancel(self, generation: int) -> None:
        result = await self._ctx.backend.cancel_order(self._order.id)
        if generation != self._generation:
            logger.debug("dropping cancellation result for closed session, order %s", self._order.id)
            return

        match result:
            case Ok(_):
                logger.info("order %s cancelled", self._order.id)
            case Error(e):
                logger.warning(
                    "cancelling order %s failed: %s %s",
                    self._order.id,
                    e.code or e.kind.name,
                    e.message,
                )
                self._ctx.notifier.error(e.user_message(M.PAYMENT_ERRORS, M.CANCEL_FAILED))

        self._cancelling = False
        if self._status is not PaymentStatus.EXPIRED:
            self._status = PaymentStatus.CANCELLED
        if not self._state.is_terminal:
            self._state = SessionState.CANCELLED
        self._request = None
        self._ctx.cart.clear()
        self._ctx.navigator.navigate(Route.PRODUCTS)
        self._changed()

    # ═════════════════════════════════════════════════════════════════════════
    # Plumbing
    # ═════════════════════════════════════════════════════════════════════════

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("payment session task crashed", exc_info=exc)

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self)


__all__ = ("PaymentSession",)
