"""
Catalog — products for sale and their cached listing.

    from kiosk import catalog as P

    listing = P.ReadThrough("products:available", api.list_available_products,
                            P.TtlTier(ttl=timedelta(minutes=5)))
    match await listing.get():
        case Ok(r):
            show(P.visible(r.value))
"""

from __future__ import annotations

from kiosk.catalog._types import ProductStatus, Product, visible
from kiosk.catalog._cache import Tier, TtlTier, CacheResult, ReadThrough

__all__ = (
    "ProductStatus",
    "Product",
    "visible",
    "Tier",
    "TtlTier",
    "CacheResult",
    "ReadThrough",
)
