"""
Pricing — turn requested product ids into priced line items.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from depstore._types import Money, ZERO
from depstore.domain import Product, ProductNotFound
from depstore.repositories import ProductStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PricedProducts:
    products: tuple[Product, ...]

    @property
    def subtotal(self) -> Money:
        return sum((p.price for p in self.products), ZERO)


class ProductPricer:
    """
    Prices a product id list.

    Items are looked up by the ids supplied and come back in request
    order, one entry per requested id, duplicates included. Any unknown
    id rejects the whole list.
    """

    def __init__(self, products: ProductStore) -> None:
        self._products = products

    async def price(self, ids: Sequence[int]) -> PricedProducts:
        found = {p.id: p for p in await self._products.get_many(ids)}

        missing = tuple(dict.fromkeys(i for i in ids if i not in found))
        if missing:
            logger.warning("pricing.missing_products", missing=list(missing))
            raise ProductNotFound(missing)

        return PricedProducts(tuple(found[i] for i in ids))


__all__ = ("PricedProducts", "ProductPricer")
