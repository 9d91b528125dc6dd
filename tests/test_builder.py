"""Tests for cart line validation and pricing."""

from decimal import Decimal

from orderdesk.catalog import InsufficientStock, ProductNotFound
from orderdesk.orders import InvalidQuantity, LineRequest, prepare_items, prepare_line

from helpers import unwrap_err, unwrap_ok


async def test_prepare_line_prices_and_reserves(session_factory, add_product, stock_of):
    await add_product(1, stock=10, price="11.28")

    async with session_factory() as session:
        line = unwrap_ok(await prepare_line(session, LineRequest(1, 6)))
        await session.commit()

    assert line.unit_price == Decimal("11.28")
    assert line.total == Decimal("67.68")
    assert await stock_of(1) == 4


async def test_prepare_line_checks_product_before_quantity(session_factory):
    async with session_factory() as session:
        error = unwrap_err(await prepare_line(session, LineRequest(999, 0)))

    assert error == ProductNotFound(999)


async def test_prepare_line_rejects_zero_quantity(session_factory, add_product):
    await add_product(1, stock=10)

    async with session_factory() as session:
        error = unwrap_err(await prepare_line(session, LineRequest(1, 0)))

    assert error == InvalidQuantity(product_id=1, quantity=0)


async def test_batch_keeps_input_order(session_factory, add_product):
    await add_product(1, stock=10, price="1.00")
    await add_product(2, stock=10, price="2.00")

    async with session_factory() as session:
        lines = unwrap_ok(
            await prepare_items(session, [LineRequest(2, 1), LineRequest(1, 3)])
        )

    assert [(line.product_id, line.total) for line in lines] == [
        (2, Decimal("2.00")),
        (1, Decimal("3.00")),
    ]


async def test_batch_short_circuits_on_first_failure(session_factory, add_product, stock_of):
    await add_product(1, stock=10)
    await add_product(2, stock=1, name="Last One")
    await add_product(3, stock=10)

    async with session_factory() as session:
        error = unwrap_err(
            await prepare_items(
                session,
                [LineRequest(1, 2), LineRequest(2, 5), LineRequest(3, 0)],
            )
        )
        await session.rollback()

    # Second line fails; the third is never looked at
    assert isinstance(error, InsufficientStock)
    assert error.product_name == "Last One"
    # Owner's rollback releases the reservation of line one
    assert await stock_of(1) == 10


async def test_same_product_twice_draws_from_one_stock(session_factory, add_product):
    await add_product(1, stock=5)

    async with session_factory() as session:
        error = unwrap_err(
            await prepare_items(session, [LineRequest(1, 3), LineRequest(1, 3)])
        )

    assert isinstance(error, InsufficientStock)
    assert error.available == 2
