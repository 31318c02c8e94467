"""
Delivery fee — external rate lookup with a hard price floor.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol

import combinators as C
import structlog
from kungfu import Error, Ok

from depstore._types import Lazy, Money
from depstore.domain import RateProviderError, StoreError

logger = structlog.get_logger(__name__)

MINIMUM_FEE: Money = Decimal("5")


# ═══════════════════════════════════════════════════════════════════════════════
# Rate Provider — external collaborator
# ═══════════════════════════════════════════════════════════════════════════════


class RateProvider(Protocol):
    async def compute(self, zip_code: str) -> Money: ...


@dataclass(frozen=True, slots=True)
class TableRateProvider:
    """
    In-process rate table keyed by postal-code prefix.

    The longest matching prefix wins; anything else pays the default.
    """

    default: Money = Decimal("12.00")
    rates: Mapping[str, Money] = field(default_factory=dict[str, Money])

    async def compute(self, zip_code: str) -> Money:
        digits = zip_code.replace("-", "").strip()
        for size in range(len(digits), 0, -1):
            rate = self.rates.get(digits[:size])
            if rate is not None:
                return rate
        return self.default


# ═══════════════════════════════════════════════════════════════════════════════
# Service
# ═══════════════════════════════════════════════════════════════════════════════


def _as_store_error(e: Exception) -> StoreError:
    if isinstance(e, StoreError):
        return e
    error = RateProviderError(f"Rate provider failed: {e}")
    error.__cause__ = e
    return error


def _as_money(raw: object) -> Money:
    """Read a provider quote as Money. Floats go through their shortest repr."""
    match raw:
        case bool():
            raise TypeError(f"fee quote must be a number, got {raw!r}")
        case Decimal():
            amount = raw
        case int() | float():
            amount = Decimal(str(raw))
        case _:
            raise TypeError(f"fee quote must be a number, got {type(raw).__name__}")
    if not amount.is_finite():
        raise ValueError(f"fee quote must be finite, got {raw!r}")
    return amount


class DeliveryFeeService:
    """Asks the rate provider for a fee and never returns less than MINIMUM_FEE."""

    def __init__(self, rates: RateProvider) -> None:
        self._rates = rates

    async def _quote(self, zip_code: str) -> Money:
        return _as_money(await self._rates.compute(zip_code))

    async def get_fee(self, zip_code: str) -> Money:
        quote: Lazy[Money, StoreError] = C.catching_async(
            lambda: self._quote(zip_code),
            on_error=_as_store_error,
        )
        match await quote():
            case Ok(raw):
                if raw < MINIMUM_FEE:
                    logger.info("delivery.fee_clamped", zip_code=zip_code, raw=str(raw))
                    return MINIMUM_FEE
                return raw
            case Error(e):
                raise e


__all__ = ("MINIMUM_FEE", "RateProvider", "TableRateProvider", "DeliveryFeeService")
