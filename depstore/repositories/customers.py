"""Customer lookup."""

from __future__ import annotations

from kungfu import Option, from_optional
from sqlalchemy import select

from depstore.domain import Customer
from depstore.store import Connection, customers


class CustomerRepository:
    def __init__(self, connection: Connection) -> None:
        self._connection = connection

    async def get(self, customer_id: str) -> Option[Customer]:
        stmt = select(customers.c.id, customers.c.name, customers.c.email).where(
            customers.c.id == customer_id
        )
        async with self._connection.acquire() as conn:
            row = (await conn.execute(stmt)).one_or_none()

        return from_optional(
            Customer(id=row.id, name=row.name, email=row.email) if row else None
        )


__all__ = ("CustomerRepository",)
