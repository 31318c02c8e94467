"""
Domain — customers, products, promo codes and the orders built from them.

Every record is immutable. An Order embeds its products by value so
line-item prices are frozen at placement time; its subtotal and total
are always derived, never stored.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from depstore._types import Money, ZERO


# ═══════════════════════════════════════════════════════════════════════════════
# Reference Data
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Customer:
    id: str
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class Product:
    id: int
    name: str
    price: Money


@dataclass(frozen=True, slots=True)
class PromoCode:
    """
    Coupon mapping to a flat discount.

    A code past its expiration still exists; it just discounts nothing.
    """

    code: str
    value: Money
    expires_at: datetime

    def is_applicable(self, now: datetime) -> bool:
        return now < self.expires_at

    def discount_at(self, now: datetime) -> Money:
        return self.value if self.is_applicable(now) else ZERO


# ═══════════════════════════════════════════════════════════════════════════════
# Placement
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PlaceOrder:
    """Inbound placement request. Product ids keep order and duplicates."""

    customer_id: str
    zip_code: str
    promo_code: str | None
    products: tuple[int, ...]


def new_order_code() -> str:
    return uuid.uuid4().hex[:8].upper()


@dataclass(frozen=True, slots=True)
class Order:
    code: str
    customer_id: str
    created_at: datetime
    delivery_fee: Money
    discount: Money
    products: tuple[Product, ...]

    @property
    def subtotal(self) -> Money:
        return sum((p.price for p in self.products), ZERO)

    @property
    def total(self) -> Money:
        return self.subtotal - self.discount + self.delivery_fee

    def confirmation(self) -> str:
        return f"Order {self.code} placed successfully!"


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class StoreError(Exception):
    code: str = "STORE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CustomerNotFound(StoreError):
    code = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: str) -> None:
        super().__init__(f"Customer {customer_id} not found")
        self.customer_id = customer_id


class ProductNotFound(StoreError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, missing: tuple[int, ...]) -> None:
        ids = ", ".join(str(i) for i in missing)
        super().__init__(f"Products not found: {ids}")
        self.missing = missing


class RateProviderError(StoreError):
    code = "RATE_PROVIDER_ERROR"


class ConfigurationError(StoreError):
    code = "CONFIGURATION_ERROR"


__all__ = (
    "Customer",
    "Product",
    "PromoCode",
    "PlaceOrder",
    "Order",
    "new_order_code",
    "StoreError",
    "CustomerNotFound",
    "ProductNotFound",
    "RateProviderError",
    "ConfigurationError",
)
