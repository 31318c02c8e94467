"""
Store contracts — what the pipeline needs from the data store.

Absence is an Option, never an exception.
"""

from collections.abc import Sequence
from typing import Protocol

from kungfu import Option

from depstore.domain import Customer, Product, PromoCode


class CustomerStore(Protocol):
    async def get(self, customer_id: str) -> Option[Customer]: ...


class ProductStore(Protocol):
    async def get_many(self, ids: Sequence[int]) -> list[Product]:
        """Records for the ids that exist, in no particular order."""
        ...


class PromoCodeStore(Protocol):
    async def get(self, code: str) -> Option[PromoCode]: ...


__all__ = ("CustomerStore", "ProductStore", "PromoCodeStore")
