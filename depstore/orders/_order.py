"""
Order — terminal node, assembles the Order from everything gathered.
"""

from datetime import UTC, datetime

import structlog

from depstore import graph as G
from depstore.domain import Order, new_order_code
from depstore.orders._customer import CustomerNode
from depstore.orders._fees import DeliveryFeeNode
from depstore.orders._products import PricedProductsNode
from depstore.orders._promo import DiscountNode

logger = structlog.get_logger(__name__)


@G.node
class PlaceOrderNode:
    """Final node: depends on the fee, the priced products and the discount."""

    def __init__(self, data: Order) -> None:
        self.data = data

    @classmethod
    async def __compose__(
        cls,
        customer: CustomerNode,
        fee: DeliveryFeeNode,
        priced: PricedProductsNode,
        discount: DiscountNode,
    ) -> "PlaceOrderNode":
        order = Order(
            code=new_order_code(),
            customer_id=customer.data.id,
            created_at=datetime.now(UTC),
            delivery_fee=fee.fee,
            discount=discount.amount,
            products=priced.data.products,
        )
        logger.info(
            "order.placed",
            order_code=order.code,
            customer_id=order.customer_id,
            items=len(order.products),
            total=str(order.total),
        )
        return cls(order)


__all__ = ("PlaceOrderNode",)
