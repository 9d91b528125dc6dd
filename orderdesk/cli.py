"""
Command line — database setup, quick reads, HTTP server.

    orderdesk init-db --seed
    orderdesk orders
    orderdesk discount 3
    orderdesk serve --port 8000
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from dataclasses import replace

import uvicorn
from kungfu import Ok, Error

from orderdesk.api import create_app, schemas
from orderdesk.config import Settings
from orderdesk.seed import seed
from orderdesk.services import build_services

logger = logging.getLogger("orderdesk")


# ═══════════════════════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════════════════════


async def init_db(settings: Settings, with_seed: bool) -> int:
    services = await build_services(settings, tiers=())
    try:
        if with_seed:
            created = await seed(services.session_factory)
            print(f"seeded orders: {created}")
        print(f"schema ready at {settings.database_url}")
    finally:
        await services.close()
    return 0


async def list_orders(settings: Settings) -> int:
    services = await build_services(settings, create_schema=False, tiers=())
    try:
        match await services.read_cache.get_all_orders():
            case Ok(orders):
                out = schemas.OrderListData(data=[schemas.OrderOut.from_domain(o) for o in orders])
                print(out.model_dump_json(indent=2))
                return 0
            case Error(e):
                logger.error("%s", e)
                return 1
    finally:
        await services.close()


async def show_discount(settings: Settings, order_id: int) -> int:
    services = await build_services(settings, create_schema=False, tiers=())
    try:
        match await services.discounts.calculate(order_id):
            case Ok(result):
                print(schemas.DiscountResultOut.from_domain(result).model_dump_json(indent=2))
                return 0
            case Error(e):
                logger.error("%s", e)
                return 1
    finally:
        await services.close()


def serve(settings: Settings, host: str, port: int) -> int:
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())
    return 0


# ═══════════════════════════════════════════════════════════════════════════════
# Entry Point
# ═══════════════════════════════════════════════════════════════════════════════


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="orderdesk", description="Order management backend.")
    p.add_argument("--database-url", default=None, help="Overrides ORDERDESK_DATABASE_URL")
    sub = p.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Create tables")
    init.add_argument("--seed", action="store_true", help="Insert demo customers, products and orders")

    sub.add_parser("orders", help="Print every live order as JSON")

    discount = sub.add_parser("discount", help="Print the discount breakdown of an order")
    discount.add_argument("order_id", type=int)

    srv = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    return p


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = Settings.from_env()
    if args.database_url:
        settings = replace(settings, database_url=args.database_url)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    match args.command:
        case "init-db":
            return asyncio.run(init_db(settings, args.seed))
        case "orders":
            return asyncio.run(list_orders(settings))
        case "discount":
            return asyncio.run(show_discount(settings, args.order_id))
        case "serve":
            return serve(settings, args.host, args.port)
        case _:
            raise SystemExit(f"unknown command {args.command!r}")


if __name__ == "__main__":
    raise SystemExit(main())
