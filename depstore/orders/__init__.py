"""
Orders — the placement graph.

Structure:
    _input.py     — PlacementNode (entry point)
    _customer.py  — CustomerNode (gate)
    _fees.py      — DeliveryFeeNode
    _products.py  — PricedProductsNode
    _promo.py     — DiscountNode
    _order.py     — PlaceOrderNode (terminal)
    _service.py   — OrderService

The fee quote, product pricing and promo lookup depend only on the
request and the customer, so they run concurrently.
"""

from depstore.orders._input import PlacementNode
from depstore.orders._customer import CustomerNode
from depstore.orders._fees import DeliveryFeeNode
from depstore.orders._products import PricedProductsNode
from depstore.orders._promo import DiscountNode
from depstore.orders._order import PlaceOrderNode
from depstore.orders._service import OrderService, placement

__all__ = (
    "PlacementNode",
    "CustomerNode",
    "DeliveryFeeNode",
    "PricedProductsNode",
    "DiscountNode",
    "PlaceOrderNode",
    "OrderService",
    "placement",
)
