"""
Promo — flat discount from an optional coupon.

No code, an unknown code and an expired code all discount zero.
"""

from datetime import UTC, datetime

import structlog
from kungfu import Nothing, Some

from depstore import graph as G
from depstore._types import Money, ZERO
from depstore.orders._customer import CustomerNode
from depstore.orders._input import PlacementNode
from depstore.repositories import PromoCodeStore

logger = structlog.get_logger(__name__)


@G.node
class DiscountNode:
    def __init__(self, amount: Money) -> None:
        self.amount = amount

    @classmethod
    async def __compose__(
        cls,
        placement: PlacementNode,
        customer: CustomerNode,
        promos: PromoCodeStore,
    ) -> "DiscountNode":
        code = placement.data.promo_code
        if not code:
            return cls(ZERO)

        match await promos.get(code):
            case Some(promo):
                now = datetime.now(UTC)
                if not promo.is_applicable(now):
                    logger.info("order.promo_expired", promo_code=code)
                    return cls(ZERO)
                logger.info("order.promo_applied", promo_code=code, value=str(promo.value))
                return cls(promo.value)
            case Nothing():
                logger.info("order.promo_unknown", promo_code=code)
                return cls(ZERO)


__all__ = ("DiscountNode",)
