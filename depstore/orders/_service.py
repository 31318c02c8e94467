"""
OrderService — runs the placement graph inside a request scope.
"""

from __future__ import annotations

from kungfu import Error, Ok, Result

from depstore import graph as G
from depstore.container import RequestScope
from depstore.domain import CustomerNotFound, Order, PlaceOrder
from depstore.orders._order import PlaceOrderNode
from depstore.repositories import CustomerStore, PromoCodeStore
from depstore.services import DeliveryFeeService, ProductPricer

placement = G.graph(PlaceOrderNode).requiring(
    CustomerStore,
    DeliveryFeeService,
    ProductPricer,
    PromoCodeStore,
)
"""
    PlacementNode
         │
    CustomerNode ── CustomerNotFound stops here
     ┌───┼─────────────┐
     │   │             │
    Fee  PricedProducts Discount     (concurrent)
     └───┼─────────────┘
    PlaceOrderNode
"""


class OrderService:
    """
    Places orders.

    Collaborators come from the RequestScope passed in, so every store
    of one placement shares that request's Connection.
    """

    def __init__(self, scope: RequestScope) -> None:
        self._scope = scope

    async def place(self, request: PlaceOrder) -> Result[Order, CustomerNotFound]:
        """
        Place one order.

        An unknown customer is an expected outcome and comes back as
        Error. ProductNotFound, RateProviderError and store failures
        propagate.
        """
        try:
            node = await placement.within(self._scope, request)
        except CustomerNotFound as e:
            return Error(e)
        return Ok(node.data)


__all__ = ("OrderService", "placement")
