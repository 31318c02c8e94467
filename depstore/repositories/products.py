"""Product lookup by id."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select

from depstore.domain import Product
from depstore.store import Connection, products


class ProductRepository:
    def __init__(self, connection: Connection) -> None:
        self._connection = connection

    async def get_many(self, ids: Sequence[int]) -> list[Product]:
        unique = sorted(set(ids))
        if not unique:
            return []

        stmt = select(products.c.id, products.c.name, products.c.price).where(
            products.c.id.in_(unique)
        )
        async with self._connection.acquire() as conn:
            rows = (await conn.execute(stmt)).all()

        return [Product(id=r.id, name=r.name, price=r.price) for r in rows]


__all__ = ("ProductRepository",)
