"""
Discount types — policy, discount records, result.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from orderdesk._types import CategoryId, OrderId

# ═══════════════════════════════════════════════════════════════════════════════
# Policy — Thresholds and Rates
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class DiscountPolicy:
    """
    Discount thresholds and rates.

    Fluent builder pattern, each method returns a new policy.

    Example:
        policy = (
            DiscountPolicy()
            .with_category(min_items=10, rate=Decimal("0.15"))
            .with_total_amount(min_amount=Decimal("2500"))
        )
    """

    category_min_items: int = 6
    category_rate: Decimal = Decimal("0.10")
    total_min_amount: Decimal = Decimal("1000")
    total_rate: Decimal = Decimal("0.10")

    def with_category(
        self,
        *,
        min_items: int | None = None,
        rate: Decimal | None = None,
    ) -> DiscountPolicy:
        """
        Configure the category rule.

        Example:
            .with_category(min_items=6, rate=Decimal("0.10"))
        """
        return DiscountPolicy(
            category_min_items=min_items if min_items is not None else self.category_min_items,
            category_rate=rate if rate is not None else self.category_rate,
            total_min_amount=self.total_min_amount,
            total_rate=self.total_rate,
        )

    def with_total_amount(
        self,
        *,
        min_amount: Decimal | None = None,
        rate: Decimal | None = None,
    ) -> DiscountPolicy:
        """Configure the subtotal threshold rule."""
        return DiscountPolicy(
            category_min_items=self.category_min_items,
            category_rate=self.category_rate,
            total_min_amount=min_amount if min_amount is not None else self.total_min_amount,
            total_rate=rate if rate is not None else self.total_rate,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Discount Records
# ═══════════════════════════════════════════════════════════════════════════════


def format_rate(rate: Decimal) -> str:
    """Decimal("0.10") → "10%", Decimal("0.125") → "12.5%"."""
    return f"{(rate * 100).normalize():f}%"


@dataclass(frozen=True, slots=True)
class CategoryDiscount:
    category_id: CategoryId
    item_count: int
    rate: Decimal
    amount: Decimal
    type: Literal["category"] = "category"


@dataclass(frozen=True, slots=True)
class TotalAmountDiscount:
    min_amount: Decimal
    order_total: Decimal
    rate: Decimal
    amount: Decimal
    type: Literal["total_amount"] = "total_amount"


type Discount = CategoryDiscount | TotalAmountDiscount


# ═══════════════════════════════════════════════════════════════════════════════
# Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class DiscountResult:
    """Priced discount breakdown. Discounts stack off the original subtotal."""

    order_id: OrderId
    subtotal: Decimal
    discounts: tuple[Discount, ...]
    total_discount: Decimal
    total: Decimal


__all__ = (
    "DiscountPolicy",
    "format_rate",
    "CategoryDiscount",
    "TotalAmountDiscount",
    "Discount",
    "DiscountResult",
)
