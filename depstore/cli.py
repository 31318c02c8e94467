"""depstore command-line interface.

Usage:
    depstore init-db [--demo]                      # Create tables, optionally seed
    depstore serve [--host HOST] [--port PORT]     # Run the HTTP app
    depstore place C1 01000-000 1 2 [--promo CODE] # Place one order
"""

import argparse
import asyncio
import sys
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from pathlib import Path

import structlog
from kungfu import Error, Ok

from depstore.domain import (
    ConfigurationError,
    Customer,
    PlaceOrder,
    Product,
    ProductNotFound,
    PromoCode,
)
from depstore.extensions import build_container
from depstore.orders import OrderService
from depstore.services import TableRateProvider
from depstore.settings import Settings, load_settings
from depstore.store import create_engine, create_schema, dispose_engine, seed
from depstore.utils.logging import configure_logging

logger = structlog.get_logger(__name__)

DEMO_CUSTOMERS = (
    Customer(id="C1", name="Ada Lovelace", email="ada@example.com"),
    Customer(id="C2", name="Alan Turing", email="alan@example.com"),
)

DEMO_PRODUCTS = (
    Product(id=1, name="Notebook", price=Decimal("10.00")),
    Product(id=2, name="Pen set", price=Decimal("15.50")),
    Product(id=3, name="Desk lamp", price=Decimal("42.00")),
)


def demo_promos(now: datetime) -> tuple[PromoCode, ...]:
    return (
        PromoCode(code="WELCOME5", value=Decimal("5.00"), expires_at=now + timedelta(days=365)),
        PromoCode(code="OLD10", value=Decimal("10.00"), expires_at=now - timedelta(days=1)),
    )


def default_rates() -> TableRateProvider:
    return TableRateProvider(
        default=Decimal("12.00"),
        rates={"01": Decimal("3.00"), "02": Decimal("8.00")},
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════════════════════


async def init_db(settings: Settings, demo: bool) -> None:
    engine = create_engine(settings)
    try:
        await create_schema(engine)
        if demo:
            await seed(
                engine,
                customer_rows=DEMO_CUSTOMERS,
                product_rows=DEMO_PRODUCTS,
                promo_rows=demo_promos(datetime.now(UTC)),
            )
    finally:
        await dispose_engine(engine)
    print("Schema ready." + (" Demo data loaded." if demo else ""))


async def place(settings: Settings, request: PlaceOrder) -> int:
    container = build_container(settings, default_rates())
    try:
        async with container.scope() as scope:
            result = await OrderService(scope).place(request)
    except ProductNotFound as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        await container.aclose()

    match result:
        case Ok(order):
            print(order.confirmation())
            print(f"  subtotal {order.subtotal}  discount {order.discount}  "
                  f"delivery {order.delivery_fee}  total {order.total}")
            return 0
        case Error(e):
            print(e.message, file=sys.stderr)
            return 1


def serve(settings: Settings, host: str, port: int) -> None:
    import uvicorn

    from depstore.api import create_app

    app = create_app(build_container(settings, default_rates()))
    logger.info("api.starting", host=host, port=port)
    uvicorn.run(app, host=host, port=port, log_config=None)


# ═══════════════════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════════════════


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="depstore", description="depstore order placement")
    parser.add_argument("--config", type=Path, default=None, help="JSON settings file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init-db", help="Create the database tables")
    init_parser.add_argument("--demo", action="store_true", help="Load demo customers, products and promo codes")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP app")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    place_parser = subparsers.add_parser("place", help="Place one order")
    place_parser.add_argument("customer_id")
    place_parser.add_argument("zip_code")
    place_parser.add_argument("products", nargs="*", type=int, metavar="PRODUCT")
    place_parser.add_argument("--promo", default=None, help="Promo code")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        print(e.message, file=sys.stderr)
        return 2
    configure_logging(settings)

    match args.command:
        case "init-db":
            asyncio.run(init_db(settings, args.demo))
            return 0
        case "serve":
            serve(settings, args.host, args.port)
            return 0
        case "place":
            request = PlaceOrder(
                customer_id=args.customer_id,
                zip_code=args.zip_code,
                promo_code=args.promo,
                products=tuple(args.products),
            )
            return asyncio.run(place(settings, request))
        case _:
            raise AssertionError(args.command)


if __name__ == "__main__":
    sys.exit(main())
