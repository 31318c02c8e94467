"""
Repositories — store contracts and their SQLAlchemy implementations.

Each repository is built against the Connection of the current request
scope and reads through it.
"""

from depstore.repositories._contracts import CustomerStore, ProductStore, PromoCodeStore
from depstore.repositories.customers import CustomerRepository
from depstore.repositories.products import ProductRepository
from depstore.repositories.promo_codes import PromoCodeRepository

__all__ = (
    "CustomerStore",
    "ProductStore",
    "PromoCodeStore",
    "CustomerRepository",
    "ProductRepository",
    "PromoCodeRepository",
)
