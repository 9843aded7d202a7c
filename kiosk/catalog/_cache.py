"""
Catalog cache — stale-after-TTL tiers in front of the product listing.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from kiosk._types import Lazy, LazyCoroResult, Result, Ok, Error

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Tier Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Tier[T](Protocol):
    """
    Cache tier protocol.

    The kiosk ships an in-memory tier; a persistent one would implement the
    same three coroutines.
    """

    @property
    def name(self) -> str:
        """Tier name for debugging."""
        ...

    async def get(self, key: str) -> tuple[T, timedelta] | None:
        """Value and time left before it goes stale. None on miss."""
        ...

    async def set(self, key: str, value: T) -> None:
        ...

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if existed."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# TTL Tier — In-Memory, Expiring
# ═══════════════════════════════════════════════════════════════════════════════


class TtlTier[T]:
    """
    In-memory tier whose entries go stale after `ttl`.

    Example:
        tier = TtlTier[list[Product]](ttl=timedelta(minutes=5))
    """

    def __init__(
        self,
        ttl: timedelta,
        *,
        max_size: int = 64,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl.total_seconds()
        self._max_size = max_size
        self._clock = clock
        self._entries: dict[str, tuple[T, float]] = {}

    @property
    def name(self) -> str:
        return "memory"

    async def get(self, key: str) -> tuple[T, timedelta] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        left = self._ttl - (self._clock() - stored_at)
        if left <= 0:
            del self._entries[key]
            return None
        return value, timedelta(seconds=left)

    async def set(self, key: str, value: T) -> None:
        if key not in self._entries and len(self._entries) >= self._max_size:
            # Evict oldest
            oldest = min(self._entries, key=lambda k: self._entries[k][1])
            del self._entries[oldest]
        self._entries[key] = (value, self._clock())

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CacheResult[T]:
    """Cache read with metadata."""
    value: T
    hit: bool
    tier: str | None
    ttl_remaining: timedelta | None


# ═══════════════════════════════════════════════════════════════════════════════
# Read-Through Cache
# ═══════════════════════════════════════════════════════════════════════════════


class ReadThrough[T, E]:
    """
    Read-through cache over one lazily fetched value per key.

    Example:
        products = ReadThrough(
            "products:available",
            api.list_available_products,
            TtlTier(ttl=timedelta(minutes=5)),
        )
        result = await products.get()
    """

    def __init__(
        self,
        key: str,
        fetch: Callable[[], Lazy[T, E]],
        *tiers: Tier[T],
    ) -> None:
        self._key = key
        self._fetch = fetch
        self._tiers = tiers

    def get(self) -> Lazy[CacheResult[T], E]:
        """
        Read the value.

        Tries tiers in order, then falls back to fetch.
        On fetch success, populates all tiers.
        """
        key = self._key
        tiers = self._tiers
        fetch = self._fetch

        async def execute() -> Result[CacheResult[T], E]:
            for t in tiers:
                try:
                    found = await t.get(key)
                except Exception:
                    logger.warning("cache tier %s failed on get(%s)", t.name, key, exc_info=True)
                    continue
                if found is not None:
                    value, left = found
                    return Ok(CacheResult(value=value, hit=True, tier=t.name, ttl_remaining=left))

            match await fetch():
                case Ok(value):
                    for t in tiers:
                        try:
                            await t.set(key, value)
                        except Exception:
                            logger.warning("cache tier %s failed on set(%s)", t.name, key, exc_info=True)
                    return Ok(CacheResult(value=value, hit=False, tier=None, ttl_remaining=None))
                case Error(e):
                    return Error(e)

        return LazyCoroResult(execute)

    async def invalidate(self) -> bool:
        """Drop the value from every tier. Returns True if any tier held it."""
        deleted = False
        for t in self._tiers:
            try:
                if await t.delete(self._key):
                    deleted = True
            except Exception:
                logger.warning("cache tier %s failed on delete(%s)", t.name, self._key, exc_info=True)
        return deleted


__all__ = ("Tier", "TtlTier", "CacheResult", "ReadThrough")
