"""
Discount — category and total-amount rules.

    from orderdesk import discount as D

    result = D.calculate_discounts(order, D.DiscountPolicy())
    result.total_discount
"""

from orderdesk.discount._types import (
    DiscountPolicy,
    format_rate,
    CategoryDiscount,
    TotalAmountDiscount,
    Discount,
    DiscountResult,
)
from orderdesk.discount._engine import (
    calculate_discounts,
    category_discounts,
    total_amount_discount,
)
from orderdesk.discount._service import DiscountService

__all__ = (
    "DiscountPolicy",
    "format_rate",
    "CategoryDiscount",
    "TotalAmountDiscount",
    "Discount",
    "DiscountResult",
    "calculate_discounts",
    "category_discounts",
    "total_amount_discount",
    "DiscountService",
)
