"""
Catalog types.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ProductStatus(Enum):
    AVAILABLE = "AVAILABLE"
    SOLD_OUT = "SOLD_OUT"
    HIDDEN = "HIDDEN"


class Product(BaseModel):
    """A product as listed by `GET /products/available`."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int
    name: str
    price: int
    status: ProductStatus = ProductStatus.AVAILABLE
    stock: int = 0
    sort_order: int = 0
    description: str | None = None
    image_url: str | None = None

    @property
    def is_sold_out(self) -> bool:
        return self.status is ProductStatus.SOLD_OUT or self.stock <= 0


def visible(products: list[Product]) -> list[Product]:
    """Listing order for the product screen: hidden dropped, sorted by sortOrder."""
    return sorted(
        (p for p in products if p.status is not ProductStatus.HIDDEN),
        key=lambda p: (p.sort_order, p.id),
    )


__all__ = ("ProductStatus", "Product", "visible")
