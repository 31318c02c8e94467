"""
HTTP surface — FastAPI over the placement graph.

    app = create_app(build_container(settings, TableRateProvider()))

Every request gets its own RequestScope; the container lives as long
as the app and is closed on shutdown.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

import fastapi
import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from kungfu import Error, Ok
from pydantic import BaseModel, Field

from depstore.container import Container, RequestScope
from depstore.domain import Order, PlaceOrder, ProductNotFound, RateProviderError
from depstore.orders import OrderService
from depstore.utils.logging import bind_context, clear_context

logger = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Wire Models
# ═══════════════════════════════════════════════════════════════════════════════


class PlaceOrderIn(BaseModel):
    customer_id: str = Field(min_length=1)
    zip_code: str
    promo_code: str | None = None
    products: list[int] = Field(default_factory=list)

    def to_domain(self) -> PlaceOrder:
        return PlaceOrder(
            customer_id=self.customer_id,
            zip_code=self.zip_code,
            promo_code=self.promo_code,
            products=tuple(self.products),
        )


class PlaceOrderOut(BaseModel):
    message: str

    @classmethod
    def from_domain(cls, order: Order) -> "PlaceOrderOut":
        return cls(message=order.confirmation())


# ═══════════════════════════════════════════════════════════════════════════════
# Dependencies
# ═══════════════════════════════════════════════════════════════════════════════


async def request_scope(request: Request) -> AsyncIterator[RequestScope]:
    container: Container = request.app.state.container
    async with container.scope() as scope:
        bind_context(scope=scope.detail)
        try:
            yield scope
        finally:
            clear_context()


Scope = Annotated[RequestScope, Depends(request_scope)]


# ═══════════════════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════════════════

router = fastapi.APIRouter(prefix="/v1")


@router.post("/orders", response_model=PlaceOrderOut)
async def place_order(body: PlaceOrderIn, scope: Scope) -> PlaceOrderOut:
    match await OrderService(scope).place(body.to_domain()):
        case Ok(order):
            return PlaceOrderOut.from_domain(order)
        case Error(_):
            raise HTTPException(status_code=404, detail="Customer not found")


async def _products_missing(request: Request, exc: ProductNotFound) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "missing": list(exc.missing)},
    )


async def _rates_unavailable(request: Request, exc: Exception) -> JSONResponse:
    logger.error("api.rate_provider_failed", error=str(exc))
    return JSONResponse(status_code=502, content={"detail": "Delivery rates unavailable"})


# ═══════════════════════════════════════════════════════════════════════════════
# App
# ═══════════════════════════════════════════════════════════════════════════════


def create_app(container: Container) -> fastapi.FastAPI:
    @asynccontextmanager
    async def lifespan(app: fastapi.FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await container.aclose()
            logger.info("api.stopped")

    app = fastapi.FastAPI(title="depstore", lifespan=lifespan)
    app.state.container = container
    app.include_router(router)
    app.add_exception_handler(ProductNotFound, _products_missing)  # type: ignore[arg-type]
    app.add_exception_handler(RateProviderError, _rates_unavailable)
    return app


__all__ = ("PlaceOrderIn", "PlaceOrderOut", "request_scope", "router", "create_app")
