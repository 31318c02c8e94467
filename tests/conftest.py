"""Shared test fixtures for depstore."""

import asyncio
from collections.abc import AsyncIterator, Sequence
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio
from kungfu import Option, from_optional

from depstore import container as DI
from depstore.container import Container
from depstore.domain import Customer, Product, PromoCode
from depstore.extensions import build_container
from depstore.repositories import CustomerStore, ProductStore, PromoCodeStore
from depstore.services import DeliveryFeeService, ProductPricer, RateProvider
from depstore.settings import Settings
from depstore.store import create_engine, create_schema, dispose_engine, seed

NOW = datetime.now(UTC)

CUSTOMERS = (
    Customer(id="C7", name="Grace Hopper", email="grace@example.com"),
)

PRODUCTS = (
    Product(id=1, name="Notebook", price=Decimal("10.00")),
    Product(id=2, name="Pen set", price=Decimal("15.50")),
    Product(id=3, name="Desk lamp", price=Decimal("42.00")),
)

PROMOS = (
    PromoCode(code="SAVE5", value=Decimal("5.00"), expires_at=NOW + timedelta(days=30)),
    PromoCode(code="OLD5", value=Decimal("5.00"), expires_at=NOW - timedelta(days=1)),
)


# ═══════════════════════════════════════════════════════════════════════════════
# Fakes
# ═══════════════════════════════════════════════════════════════════════════════


class InMemoryCustomers:
    def __init__(self, *customers: Customer) -> None:
        self._by_id = {c.id: c for c in customers}
        self.calls: list[str] = []

    async def get(self, customer_id: str) -> Option[Customer]:
        self.calls.append(customer_id)
        return from_optional(self._by_id.get(customer_id))


class InMemoryProducts:
    def __init__(self, *products: Product, arrive: "Rendezvous | None" = None) -> None:
        self._by_id = {p.id: p for p in products}
        self._arrive = arrive
        self.calls: list[tuple[int, ...]] = []

    async def get_many(self, ids: Sequence[int]) -> list[Product]:
        self.calls.append(tuple(ids))
        if self._arrive is not None:
            await self._arrive.arrive()
        return [self._by_id[i] for i in set(ids) if i in self._by_id]


class InMemoryPromos:
    def __init__(self, *promos: PromoCode) -> None:
        self._by_code = {p.code: p for p in promos}
        self.calls: list[str] = []

    async def get(self, code: str) -> Option[PromoCode]:
        self.calls.append(code)
        return from_optional(self._by_code.get(code))


class FixedRates:
    def __init__(self, fee: Decimal, arrive: "Rendezvous | None" = None) -> None:
        self.fee = fee
        self._arrive = arrive
        self.calls: list[str] = []

    async def compute(self, zip_code: str) -> Decimal:
        self.calls.append(zip_code)
        if self._arrive is not None:
            await self._arrive.arrive()
        return self.fee


class BrokenRates:
    async def compute(self, zip_code: str) -> Decimal:
        raise ConnectionError("rate service unreachable")


class HangingRates:
    """Never answers; records whether the call was abandoned."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.cancelled = False

    async def compute(self, zip_code: str) -> Decimal:
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        raise AssertionError("unreachable")


class Rendezvous:
    """Every party waits until all have arrived; sequential callers time out."""

    def __init__(self, parties: int, timeout: float = 1.0) -> None:
        self._parties = parties
        self._arrived = 0
        self._timeout = timeout
        self._all_here = asyncio.Event()

    async def arrive(self) -> None:
        self._arrived += 1
        if self._arrived >= self._parties:
            self._all_here.set()
        await asyncio.wait_for(self._all_here.wait(), timeout=self._timeout)


def fake_container(
    customers: InMemoryCustomers,
    products: InMemoryProducts,
    promos: InMemoryPromos,
    rates: RateProvider,
) -> Container:
    return (
        DI.container()
        .singleton(CustomerStore, instance=customers)
        .singleton(ProductStore, instance=products)
        .singleton(PromoCodeStore, instance=promos)
        .singleton(RateProvider, instance=rates)
        .transient(DeliveryFeeService)
        .transient(ProductPricer)
        .build()
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


async def prepare_database(settings: Settings) -> None:
    engine = create_engine(settings)
    try:
        await create_schema(engine)
        await seed(
            engine,
            customer_rows=CUSTOMERS,
            product_rows=PRODUCTS,
            promo_rows=PROMOS,
        )
    finally:
        await dispose_engine(engine)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a fresh SQLite file."""
    return Settings(connection_string=f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")


@pytest_asyncio.fixture
async def database(settings: Settings) -> Settings:
    """Schema created and reference data loaded."""
    await prepare_database(settings)
    return settings


@pytest_asyncio.fixture
async def store_container(database: Settings) -> AsyncIterator[Container]:
    """Production wiring over the seeded database, delivery fee fixed at 3.00."""
    c = build_container(database, FixedRates(Decimal("3.00")))
    yield c
    await c.aclose()
