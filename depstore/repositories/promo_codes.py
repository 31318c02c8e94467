"""Promo code lookup. Fetches only; expiry is the caller's decision."""

from __future__ import annotations

from kungfu import Option, from_optional
from sqlalchemy import select

from depstore.domain import PromoCode
from depstore.store import Connection, promo_codes


class PromoCodeRepository:
    def __init__(self, connection: Connection) -> None:
        self._connection = connection

    async def get(self, code: str) -> Option[PromoCode]:
        stmt = select(
            promo_codes.c.code, promo_codes.c.value, promo_codes.c.expires_at
        ).where(promo_codes.c.code == code)
        async with self._connection.acquire() as conn:
            row = (await conn.execute(stmt)).one_or_none()

        return from_optional(
            PromoCode(code=row.code, value=row.value, expires_at=row.expires_at)
            if row
            else None
        )


__all__ = ("PromoCodeRepository",)
