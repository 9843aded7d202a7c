"""
Core types for kiosk.

Re-exports from kungfu + custom type aliases.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Alias
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""

# ═══════════════════════════════════════════════════════════════════════════════
# Identity
# ═══════════════════════════════════════════════════════════════════════════════

type ProductId = int
"""Catalog product identifier."""

type OrderId = str
"""Server-assigned order identifier (numeric ids are carried as text)."""

type RequestId = str
"""Server-assigned payment request identifier."""

# ═══════════════════════════════════════════════════════════════════════════════
# Payment Status
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentStatus(Enum):
    """
    Status of one payment request.

    PENDING is the only non-terminal status. CANCELLED is never pushed by
    the server; the kiosk sets it locally after cancelling the order.
    """

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING


# ═══════════════════════════════════════════════════════════════════════════════
# Callbacks
# ═══════════════════════════════════════════════════════════════════════════════

type Callback = Callable[[], None]
"""A fire-and-forget side effect with no arguments."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Type aliases
    "Lazy",
    # Identity
    "ProductId",
    "OrderId",
    "RequestId",
    # Payment
    "PaymentStatus",
    # Callbacks
    "Callback",
)
