"""Tests for order create/update/delete with inventory consistency."""

import asyncio
import logging
from decimal import Decimal

import pytest
from kungfu import Error, Ok

from orderdesk.catalog import InsufficientStock, ProductNotFound
from orderdesk.orders import (
    CustomerNotFound,
    InvalidQuantity,
    LifecycleState,
    LineRequest,
    OrderCreationFailed,
    OrderNotFound,
    load_order,
    load_orders,
)

from helpers import unwrap_err, unwrap_ok

LIFECYCLE_LOGGER = "orderdesk.orders._lifecycle"


async def _order(session_factory, order_id):
    async with session_factory() as session:
        return await load_order(session, order_id)


def _states(caplog) -> list[str]:
    """State names from the transition log, in order."""
    return [
        r.args[-1]
        for r in caplog.records
        if r.name == LIFECYCLE_LOGGER and r.levelno == logging.DEBUG
    ]


# ═══════════════════════════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════════════════════════


async def test_create_persists_items_and_total(services, customer, add_product, stock_of):
    await add_product(1, stock=10, price="120.75", category_id=1)
    await add_product(2, stock=10, price="49.50", category_id=1)

    order = unwrap_ok(
        await services.lifecycle.create(customer, [LineRequest(2, 2), LineRequest(1, 1)])
    )

    assert order.customer_id == customer
    assert [(i.product_id, i.quantity, i.total) for i in order.items] == [
        (2, 2, Decimal("99.00")),
        (1, 1, Decimal("120.75")),
    ]
    assert order.total == Decimal("219.75")
    assert order.total == sum(i.total for i in order.items)
    assert await stock_of(1) == 9
    assert await stock_of(2) == 8


async def test_create_walks_every_state(services, customer, add_product, caplog):
    await add_product(1, stock=1)

    with caplog.at_level(logging.DEBUG, logger=LIFECYCLE_LOGGER):
        unwrap_ok(await services.lifecycle.create(customer, [LineRequest(1, 1)]))

    assert _states(caplog) == [
        LifecycleState.STARTED.name,
        LifecycleState.ITEMS_PREPARED.name,
        LifecycleState.PERSISTED.name,
        LifecycleState.COMMITTED.name,
    ]


async def test_insufficient_stock_rolls_back_everything(
    services, customer, add_product, stock_of, caplog
):
    await add_product(1, stock=1, name="Single")

    with caplog.at_level(logging.DEBUG, logger=LIFECYCLE_LOGGER):
        error = unwrap_err(await services.lifecycle.create(customer, [LineRequest(1, 2)]))

    assert isinstance(error, InsufficientStock)
    assert await stock_of(1) == 1
    async with services.session_factory() as session:
        assert await load_orders(session) == []
    assert _states(caplog)[-1] == LifecycleState.ROLLED_BACK.name
    assert any("rejected" in r.getMessage() for r in caplog.records)


async def test_failing_second_line_releases_first(services, customer, add_product, stock_of):
    await add_product(1, stock=5)
    await add_product(2, stock=0)

    error = unwrap_err(
        await services.lifecycle.create(customer, [LineRequest(1, 5), LineRequest(2, 1)])
    )

    assert isinstance(error, InsufficientStock)
    assert await stock_of(1) == 5


async def test_create_unknown_customer(services, add_product, stock_of):
    await add_product(1, stock=5)

    error = unwrap_err(await services.lifecycle.create(12345, [LineRequest(1, 1)]))

    assert error == CustomerNotFound(12345)
    assert await stock_of(1) == 5


async def test_create_unknown_product(services, customer):
    error = unwrap_err(await services.lifecycle.create(customer, [LineRequest(999, 1)]))

    assert error == ProductNotFound(999)


async def test_create_invalid_quantity(services, customer, add_product):
    await add_product(1, stock=5)

    error = unwrap_err(await services.lifecycle.create(customer, [LineRequest(1, -1)]))

    assert isinstance(error, InvalidQuantity)


async def test_unexpected_failure_is_wrapped(
    services, customer, add_product, stock_of, monkeypatch
):
    await add_product(1, stock=5)

    async def boom(session, lines):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr("orderdesk.orders._lifecycle.prepare_items", boom)

    error = unwrap_err(await services.lifecycle.create(customer, [LineRequest(1, 1)]))

    assert isinstance(error, OrderCreationFailed)
    assert isinstance(error.cause, RuntimeError)
    assert error.order_id is not None
    assert str(error).startswith(f"Failed to create order {error.order_id}")
    async with services.session_factory() as session:
        assert await load_orders(session) == []
    assert await stock_of(1) == 5


# ═══════════════════════════════════════════════════════════════════════════════
# Update
# ═══════════════════════════════════════════════════════════════════════════════


async def test_update_replaces_items(seeded, stock_of):
    order = unwrap_ok(
        await seeded.lifecycle.update(2, [LineRequest(102, 3)])
    )

    assert [(i.product_id, i.quantity) for i in order.items] == [(102, 3)]
    assert order.total == Decimal("33.84")
    # 101 and 100 restored, 102 reserved
    assert await stock_of(101) == 12
    assert await stock_of(100) == 11
    assert await stock_of(102) == 7


async def test_update_may_reuse_restored_stock(seeded, stock_of):
    # Order 1 holds 10 of product 102, ten more are on the shelf
    order = unwrap_ok(await seeded.lifecycle.update(1, [LineRequest(102, 20)]))

    assert order.total == Decimal("225.60")
    assert await stock_of(102) == 0


async def test_update_with_identical_items_is_neutral(seeded, stock_of):
    before = await _order(seeded.session_factory, 3)
    stocks = [await stock_of(pid) for pid in (100, 101, 102)]

    after = unwrap_ok(
        await seeded.lifecycle.update(
            3, [LineRequest(i.product_id, i.quantity) for i in before.items]
        )
    )

    assert after.total == before.total == Decimal("1275.18")
    assert [await stock_of(pid) for pid in (100, 101, 102)] == stocks
    assert {i.id for i in after.items}.isdisjoint({i.id for i in before.items})


async def test_failed_update_rolls_back_restoration(seeded, stock_of):
    # Order 2: 101 x2, 100 x1. Restoration succeeds, second new line fails.
    error = unwrap_err(
        await seeded.lifecycle.update(2, [LineRequest(100, 1), LineRequest(101, 1000)])
    )

    assert isinstance(error, InsufficientStock)
    assert await stock_of(100) == 10
    assert await stock_of(101) == 10
    order = await _order(seeded.session_factory, 2)
    assert [(i.product_id, i.quantity) for i in order.items] == [(101, 2), (100, 1)]
    assert order.total == Decimal("219.75")


async def test_update_missing_order(seeded):
    error = unwrap_err(await seeded.lifecycle.update(404, [LineRequest(100, 1)]))

    assert error == OrderNotFound(404)


# ═══════════════════════════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════════════════════════


async def test_delete_restores_stock_and_hides_order(seeded, stock_of):
    unwrap_ok(await seeded.lifecycle.delete(3))

    assert await stock_of(102) == 16
    assert await stock_of(100) == 20
    assert await _order(seeded.session_factory, 3) is None
    async with seeded.session_factory() as session:
        assert [o.id for o in await load_orders(session)] == [1, 2]


async def test_delete_twice(seeded, stock_of):
    unwrap_ok(await seeded.lifecycle.delete(1))

    error = unwrap_err(await seeded.lifecycle.delete(1))

    assert error == OrderNotFound(1)
    assert await stock_of(102) == 20


@pytest.mark.parametrize("order_id", [1, 2, 3])
async def test_seeded_totals_match_items(seeded, order_id):
    order = await _order(seeded.session_factory, order_id)

    assert order.total == sum(i.total for i in order.items)


# ═══════════════════════════════════════════════════════════════════════════════
# Concurrency
# ═══════════════════════════════════════════════════════════════════════════════


async def test_concurrent_creates_never_oversell(services, customer, add_product, stock_of):
    await add_product(1, stock=3)

    results = await asyncio.gather(
        *(services.lifecycle.create(customer, [LineRequest(1, 1)]) for _ in range(5))
    )

    assert sum(isinstance(r, Ok) for r in results) == 3
    assert all(isinstance(unwrap_err(r), InsufficientStock) for r in results if isinstance(r, Error))
    assert await stock_of(1) == 0


async def test_concurrent_deletes_restore_stock_once(seeded, stock_of):
    # Order 3: 102 x6, 100 x10
    first, second = await asyncio.gather(seeded.lifecycle.delete(3), seeded.lifecycle.delete(3))

    assert sorted([isinstance(first, Ok), isinstance(second, Ok)]) == [False, True]
    assert OrderNotFound(3) in [unwrap_err(r) for r in (first, second) if isinstance(r, Error)]
    assert await stock_of(102) == 16
    assert await stock_of(100) == 20


async def test_concurrent_updates_leave_one_item_set(seeded, stock_of):
    # Order 1 holds 102 x10; 102 has 20 units overall, 101 has 10 outside order 2
    results = await asyncio.gather(
        seeded.lifecycle.update(1, [LineRequest(102, 4)]),
        seeded.lifecycle.update(1, [LineRequest(101, 1)]),
    )

    assert all(isinstance(r, Ok) for r in results)
    order = await _order(seeded.session_factory, 1)
    assert len(order.items) == 1
    held = {i.product_id: i.quantity for i in order.items}
    assert await stock_of(102) + held.get(102, 0) == 20
    assert await stock_of(101) + held.get(101, 0) == 10
    assert order.total == sum(i.total for i in order.items)


async def test_concurrent_update_and_delete(seeded, stock_of):
    update, delete = await asyncio.gather(
        seeded.lifecycle.update(2, [LineRequest(100, 3)]),
        seeded.lifecycle.delete(2),
    )

    assert isinstance(delete, Ok)
    assert await _order(seeded.session_factory, 2) is None
    # Whichever ran first, the deleted order holds nothing
    assert await stock_of(100) == 11
    assert await stock_of(101) == 12
    assert isinstance(update, Ok) or unwrap_err(update) == OrderNotFound(2)
