"""
Customer — the gate every other lookup waits behind.
"""

import structlog
from kungfu import Nothing, Some

from depstore import graph as G
from depstore.domain import Customer, CustomerNotFound
from depstore.orders._input import PlacementNode
from depstore.repositories import CustomerStore

logger = structlog.get_logger(__name__)


@G.node
class CustomerNode:
    """
    Resolved customer.

    Raises CustomerNotFound when the id is unknown, so no node that
    depends on this one ever runs for an unknown customer.
    """

    def __init__(self, data: Customer) -> None:
        self.data = data

    @classmethod
    async def __compose__(
        cls,
        placement: PlacementNode,
        customers: CustomerStore,
    ) -> "CustomerNode":
        customer_id = placement.data.customer_id
        match await customers.get(customer_id):
            case Some(customer):
                return cls(customer)
            case Nothing():
                logger.info("order.customer_missing", customer_id=customer_id)
                raise CustomerNotFound(customer_id)


__all__ = ("CustomerNode",)
