"""Tests for cached order reads and write invalidation."""

from decimal import Decimal

from orderdesk.cache import CacheUnavailable, LocalTier, SqlTier
from orderdesk.orders import ALL_KEY, LineRequest, OrderNotFound, OrderReadCache, order_key

from helpers import BrokenTier, unwrap_err, unwrap_ok


async def test_get_order_populates_both_keys(seeded):
    local = LocalTier[object]()
    reads = OrderReadCache(seeded.session_factory, [local])

    order = unwrap_ok(await reads.get_order(2))
    orders = unwrap_ok(await reads.get_all_orders())

    assert order.total == Decimal("219.75")
    assert [o.id for o in orders] == [1, 2, 3]
    assert await local.get(order_key(2)) == order
    assert await local.get(ALL_KEY) == orders


async def test_missing_order_is_not_cached(seeded):
    local = LocalTier[object]()
    reads = OrderReadCache(seeded.session_factory, [local])

    assert unwrap_err(await reads.get_order(404)) == OrderNotFound(404)
    assert len(local) == 0


async def test_write_invalidates_cached_reads(seeded):
    reads = seeded.read_cache
    unwrap_ok(await reads.get_order(1))
    unwrap_ok(await reads.get_all_orders())

    unwrap_ok(await seeded.lifecycle.update(1, [LineRequest(101, 1)]))

    order = unwrap_ok(await reads.get_order(1))
    orders = unwrap_ok(await reads.get_all_orders())
    assert order.total == Decimal("49.50")
    assert orders[0].total == Decimal("49.50")


async def test_create_invalidates_cached_collection(seeded):
    reads = seeded.read_cache
    assert [o.id for o in unwrap_ok(await reads.get_all_orders())] == [1, 2, 3]

    created = unwrap_ok(await seeded.lifecycle.create(1, [LineRequest(101, 1)]))

    orders = unwrap_ok(await reads.get_all_orders())
    assert [o.id for o in orders] == [1, 2, 3, created.id]
    assert unwrap_ok(await reads.get_order(created.id)).total == Decimal("49.50")


async def test_delete_invalidates_cached_reads(seeded):
    reads = seeded.read_cache
    unwrap_ok(await reads.get_order(3))
    unwrap_ok(await reads.get_all_orders())

    unwrap_ok(await seeded.lifecycle.delete(3))

    assert unwrap_err(await reads.get_order(3)) == OrderNotFound(3)
    assert [o.id for o in unwrap_ok(await reads.get_all_orders())] == [1, 2]


async def test_database_tier_serves_when_primary_is_down(seeded):
    reads = OrderReadCache(
        seeded.session_factory,
        [BrokenTier("local"), SqlTier(seeded.session_factory)],
    )

    first = unwrap_ok(await reads.get_order(1))
    second = unwrap_ok(await reads.get_order(1))

    assert first == second
    assert first.items[0].product_id == 102


async def test_cache_unavailable_when_every_tier_fails(seeded):
    reads = OrderReadCache(seeded.session_factory, [BrokenTier("a"), BrokenTier("b")])

    error = unwrap_err(await reads.get_order(1))

    assert isinstance(error, CacheUnavailable)
    assert error.tiers == ("a", "b")
