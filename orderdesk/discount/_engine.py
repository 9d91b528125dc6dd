"""
Discount engine — pure evaluation over an order's current items.

Both rules read the original subtotal; amounts are rounded to cents one by
one, then summed.
"""

from __future__ import annotations

from decimal import Decimal

from orderdesk._types import CategoryId, money
from orderdesk.orders import Order, OrderItem
from orderdesk.discount._types import (
    CategoryDiscount,
    Discount,
    DiscountPolicy,
    DiscountResult,
    TotalAmountDiscount,
)


def _by_category(items: tuple[OrderItem, ...]) -> dict[CategoryId, list[OrderItem]]:
    # dict keeps first-appearance order of categories
    groups: dict[CategoryId, list[OrderItem]] = {}
    for item in items:
        groups.setdefault(item.product.category_id, []).append(item)
    return groups


def category_discounts(order: Order, policy: DiscountPolicy) -> list[CategoryDiscount]:
    discounts: list[CategoryDiscount] = []
    for category_id, items in _by_category(order.items).items():
        item_count = sum(item.quantity for item in items)
        if item_count < policy.category_min_items:
            continue
        category_total = sum((item.total for item in items), Decimal(0))
        discounts.append(
            CategoryDiscount(
                category_id=category_id,
                item_count=item_count,
                rate=policy.category_rate,
                amount=money(category_total * policy.category_rate),
            )
        )
    return discounts


def total_amount_discount(
    subtotal: Decimal,
    policy: DiscountPolicy,
) -> TotalAmountDiscount | None:
    if subtotal < policy.total_min_amount:
        return None
    return TotalAmountDiscount(
        min_amount=money(policy.total_min_amount),
        order_total=subtotal,
        rate=policy.total_rate,
        amount=money(subtotal * policy.total_rate),
    )


def calculate_discounts(
    order: Order,
    policy: DiscountPolicy | None = None,
) -> DiscountResult:
    """
    Evaluate every rule against `order`.

    Example:
        result = calculate_discounts(order, DiscountPolicy())
        result.total  # subtotal minus the sum of rounded amounts
    """
    policy = policy or DiscountPolicy()
    subtotal = money(sum((item.total for item in order.items), Decimal(0)))

    discounts: list[Discount] = [*category_discounts(order, policy)]
    if (by_total := total_amount_discount(subtotal, policy)) is not None:
        discounts.append(by_total)

    total_discount = money(sum((d.amount for d in discounts), Decimal(0)))
    return DiscountResult(
        order_id=order.id,
        subtotal=subtotal,
        discounts=tuple(discounts),
        total_discount=total_discount,
        total=money(subtotal - total_discount),
    )


__all__ = ("calculate_discounts", "category_discounts", "total_amount_discount")
