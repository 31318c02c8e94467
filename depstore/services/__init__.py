"""
Services — pricing and delivery fees.
"""

from depstore.services.pricing import PricedProducts, ProductPricer
from depstore.services.delivery import (
    MINIMUM_FEE,
    RateProvider,
    TableRateProvider,
    DeliveryFeeService,
)

__all__ = (
    "PricedProducts",
    "ProductPricer",
    "MINIMUM_FEE",
    "RateProvider",
    "TableRateProvider",
    "DeliveryFeeService",
)
