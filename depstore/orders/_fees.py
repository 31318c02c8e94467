"""
Delivery fee — quoted for the request's postal code.
"""

from depstore import graph as G
from depstore._types import Money
from depstore.orders._customer import CustomerNode
from depstore.orders._input import PlacementNode
from depstore.services import DeliveryFeeService


@G.node
class DeliveryFeeNode:
    def __init__(self, fee: Money) -> None:
        self.fee = fee

    @classmethod
    async def __compose__(
        cls,
        placement: PlacementNode,
        customer: CustomerNode,
        fees: DeliveryFeeService,
    ) -> "DeliveryFeeNode":
        return cls(await fees.get_fee(placement.data.zip_code))


__all__ = ("DeliveryFeeNode",)
