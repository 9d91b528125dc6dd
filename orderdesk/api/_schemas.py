"""
API schemas — pydantic request/response models.

Requests convert to domain values with `to_domain()`, responses are built
from domain values with `from_domain()`. Decimal fields serialize as strings.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from orderdesk.catalog import Product
from orderdesk.discount import (
    CategoryDiscount,
    Discount,
    DiscountResult,
    TotalAmountDiscount,
    format_rate,
)
from orderdesk.orders import Customer, LineRequest, Order, OrderItem

# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class LineIn(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)

    def to_domain(self) -> LineRequest:
        return LineRequest(product_id=self.product_id, quantity=self.quantity)


class CreateOrderIn(BaseModel):
    customer_id: int
    items: list[LineIn] = Field(..., min_length=1)

    def to_domain(self) -> list[LineRequest]:
        return [line.to_domain() for line in self.items]


class UpdateOrderIn(BaseModel):
    items: list[LineIn] = Field(..., min_length=1)

    def to_domain(self) -> list[LineRequest]:
        return [line.to_domain() for line in self.items]


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class ProductOut(BaseModel):
    id: int
    name: str
    category_id: int
    price: Decimal
    stock: int

    @classmethod
    def from_domain(cls, product: Product) -> ProductOut:
        return cls(
            id=product.id,
            name=product.name,
            category_id=product.category_id,
            price=product.price,
            stock=product.stock,
        )


class CustomerOut(BaseModel):
    id: int
    name: str
    since: date

    @classmethod
    def from_domain(cls, customer: Customer) -> CustomerOut:
        return cls(id=customer.id, name=customer.name, since=customer.since)


class OrderItemOut(BaseModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    total: Decimal
    product: ProductOut

    @classmethod
    def from_domain(cls, item: OrderItem) -> OrderItemOut:
        return cls(
            id=item.id,
            order_id=item.order_id,
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total=item.total,
            product=ProductOut.from_domain(item.product),
        )


class OrderOut(BaseModel):
    id: int
    customer_id: int
    total: Decimal
    created_at: datetime
    updated_at: datetime
    customer: CustomerOut
    items: list[OrderItemOut]

    @classmethod
    def from_domain(cls, order: Order) -> OrderOut:
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            total=order.total,
            created_at=order.created_at,
            updated_at=order.updated_at,
            customer=CustomerOut.from_domain(order.customer),
            items=[OrderItemOut.from_domain(item) for item in order.items],
        )


class OrderData(BaseModel):
    data: OrderOut


class OrderListData(BaseModel):
    data: list[OrderOut]


class OrderSaved(BaseModel):
    data: OrderOut
    message: str


class MessageOut(BaseModel):
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# Discounts
# ═══════════════════════════════════════════════════════════════════════════════


class CategoryDiscountOut(BaseModel):
    type: Literal["category"] = "category"
    category_id: int
    item_count: int
    rate: str
    amount: Decimal


class TotalAmountDiscountOut(BaseModel):
    type: Literal["total_amount"] = "total_amount"
    min_amount: Decimal
    order_total: Decimal
    rate: str
    amount: Decimal


DiscountOut = Annotated[
    CategoryDiscountOut | TotalAmountDiscountOut,
    Field(discriminator="type"),
]


def _discount_out(discount: Discount) -> CategoryDiscountOut | TotalAmountDiscountOut:
    match discount:
        case CategoryDiscount():
            return CategoryDiscountOut(
                category_id=discount.category_id,
                item_count=discount.item_count,
                rate=format_rate(discount.rate),
                amount=discount.amount,
            )
        case TotalAmountDiscount():
            return TotalAmountDiscountOut(
                min_amount=discount.min_amount,
                order_total=discount.order_total,
                rate=format_rate(discount.rate),
                amount=discount.amount,
            )


class DiscountResultOut(BaseModel):
    order_id: int
    subtotal: Decimal
    discounts: list[DiscountOut]
    total_discount: Decimal
    total: Decimal

    @classmethod
    def from_domain(cls, result: DiscountResult) -> DiscountResultOut:
        return cls(
            order_id=result.order_id,
            subtotal=result.subtotal,
            discounts=[_discount_out(d) for d in result.discounts],
            total_discount=result.total_discount,
            total=result.total,
        )


__all__ = (
    "LineIn",
    "CreateOrderIn",
    "UpdateOrderIn",
    "ProductOut",
    "CustomerOut",
    "OrderItemOut",
    "OrderOut",
    "OrderData",
    "OrderListData",
    "OrderSaved",
    "MessageOut",
    "CategoryDiscountOut",
    "TotalAmountDiscountOut",
    "DiscountResultOut",
)
