"""
Products — line items priced from the store.
"""

from depstore import graph as G
from depstore.orders._customer import CustomerNode
from depstore.orders._input import PlacementNode
from depstore.services import PricedProducts, ProductPricer


@G.node
class PricedProductsNode:
    """Requested products, in request order. Runs alongside the fee quote."""

    def __init__(self, data: PricedProducts) -> None:
        self.data = data

    @classmethod
    async def __compose__(
        cls,
        placement: PlacementNode,
        customer: CustomerNode,
        pricer: ProductPricer,
    ) -> "PricedProductsNode":
        return cls(await pricer.price(placement.data.products))


__all__ = ("PricedProductsNode",)
