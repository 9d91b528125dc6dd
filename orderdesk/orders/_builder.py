"""
Order item builder — validate cart lines against stock and price them.

Lines are processed in input order. The first failing line ends the batch;
stock already reserved for earlier lines is released by the owning
transaction's rollback, not here.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from kungfu import Result, Ok, Error

from orderdesk._types import money
from orderdesk import catalog
from orderdesk.catalog import InsufficientStock, ProductNotFound
from orderdesk.orders._types import (
    InvalidQuantity,
    LineError,
    LineRequest,
    PricedLine,
)

logger = logging.getLogger(__name__)


async def prepare_line(
    session: AsyncSession,
    line: LineRequest,
) -> Result[PricedLine, LineError]:
    """Reserve stock for one line and snapshot its price."""
    product = await catalog.lock(session, line.product_id)
    if product is None:
        return Error(ProductNotFound(line.product_id))

    if line.quantity < 1:
        return Error(InvalidQuantity(line.product_id, line.quantity))

    if not catalog.has_stock(product, line.quantity):
        return Error(
            InsufficientStock(
                product_id=product.id,
                product_name=product.name,
                requested=line.quantity,
                available=product.stock,
            )
        )

    match await catalog.decrease(session, product, line.quantity):
        case Ok(_):
            pass
        case Error(e):
            return Error(e)

    return Ok(
        PricedLine(
            product_id=product.id,
            quantity=line.quantity,
            unit_price=product.price,
            total=money(product.price * line.quantity),
        )
    )


async def prepare_items(
    session: AsyncSession,
    lines: Sequence[LineRequest],
) -> Result[list[PricedLine], LineError]:
    """
    Validate and price every line, short-circuiting on the first failure.

    Returns:
        Ok(priced lines, same order as input) or Error(first LineError)
    """
    prepared: list[PricedLine] = []

    for position, line in enumerate(lines):
        match await prepare_line(session, line):
            case Ok(priced):
                prepared.append(priced)
            case Error(e):
                logger.info("line %d rejected: %s", position, e)
                return Error(e)

    return Ok(prepared)


__all__ = ("prepare_line", "prepare_items")
