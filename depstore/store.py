"""
Store — SQLAlchemy schema, engine and the per-request connection.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import Column, DateTime, Integer, MetaData, Numeric, String, Table, insert
from sqlalchemy.engine import Dialect
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.types import TypeDecorator

from depstore.domain import Customer, Product, PromoCode, StoreError
from depstore.settings import Settings

logger = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Schema
# ═══════════════════════════════════════════════════════════════════════════════


def _in_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


class UTCDateTime(TypeDecorator[datetime]):
    """
    Timestamp stored as UTC, read back as an aware UTC datetime.

    SQLite keeps only the wall-clock fields, so the offset is applied
    before binding. Naive values are taken to be UTC already.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        return None if value is None else _in_utc(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        return None if value is None else _in_utc(value)


metadata = MetaData()

customers = Table(
    "customers",
    metadata,
    Column("id", String(50), primary_key=True),
    Column("name", String(120), nullable=False),
    Column("email", String(255), nullable=False),
)

products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String(120), nullable=False),
    Column("price", Numeric(10, 2), nullable=False),
)

promo_codes = Table(
    "promo_codes",
    metadata,
    Column("code", String(50), primary_key=True),
    Column("value", Numeric(10, 2), nullable=False),
    Column("expires_at", UTCDateTime(timezone=True), nullable=False),
)


# ═══════════════════════════════════════════════════════════════════════════════
# Engine (singleton)
# ═══════════════════════════════════════════════════════════════════════════════


def create_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(settings.connection_string, echo=settings.echo_sql)


async def dispose_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.debug("engine.disposed")


# ═══════════════════════════════════════════════════════════════════════════════
# Connection (scoped)
# ═══════════════════════════════════════════════════════════════════════════════


class Connection:
    """
    The data-store connection of one request.

    The underlying AsyncConnection is opened on first acquire() and closed
    by aclose(). Use is exclusive: concurrent nodes of the same request
    queue on the lock instead of interleaving statements.
    """

    __slots__ = ("_engine", "_conn", "_lock", "_closed")

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._conn: AsyncConnection | None = None
        self._lock = asyncio.Lock()
        self._closed = False

    @property
    def opened(self) -> bool:
        return self._conn is not None

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[AsyncConnection]:
        async with self._lock:
            if self._closed:
                raise StoreError("Connection already released")
            if self._conn is None:
                self._conn = await self._engine.connect()
                logger.debug("connection.opened")
            yield self._conn

    async def aclose(self) -> None:
        async with self._lock:
            self._closed = True
            conn, self._conn = self._conn, None
            if conn is not None:
                await conn.close()
                logger.debug("connection.closed")


# ═══════════════════════════════════════════════════════════════════════════════
# Setup helpers
# ═══════════════════════════════════════════════════════════════════════════════


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


async def seed(
    engine: AsyncEngine,
    *,
    customer_rows: Iterable[Customer] = (),
    product_rows: Iterable[Product] = (),
    promo_rows: Iterable[PromoCode] = (),
) -> None:
    rows = [
        (customers, [{"id": c.id, "name": c.name, "email": c.email} for c in customer_rows]),
        (products, [{"id": p.id, "name": p.name, "price": p.price} for p in product_rows]),
        (
            promo_codes,
            [{"code": p.code, "value": p.value, "expires_at": p.expires_at} for p in promo_rows],
        ),
    ]
    async with engine.begin() as conn:
        for table, values in rows:
            if values:
                await conn.execute(insert(table), values)


__all__ = (
    "UTCDateTime",
    "metadata",
    "customers",
    "products",
    "promo_codes",
    "create_engine",
    "dispose_engine",
    "Connection",
    "create_schema",
    "seed",
)
