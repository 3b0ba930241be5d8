"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI / storefront and the application layer
without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from dsv.domain.model.cart import ClientCartItem
from dsv.domain.model.order import Order


@dataclass(frozen=True)
class CreateOrderRequest:
    """Input: a checkout submission, guest or authenticated.

    ``subtotal`` and ``shipping_fee`` are the figures the client computed;
    ``items`` is the client-side cart and may be empty.
    """

    payment_method: str
    user_id: int | None = None
    items: list[ClientCartItem] = field(default_factory=list)
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_email: str | None = None
    shipping_address: str | None = None
    subtotal: Decimal | None = None
    shipping_fee: Decimal | None = None
    notes: str | None = None


@dataclass(frozen=True)
class OrderItemDTO:
    id: int | None
    product_id: int
    product_name: str
    product_description: str | None
    category_name: str | None
    product_image_url: str | None
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class OrderDTO:
    """Output: the full order projection returned to callers and notifiers."""

    id: int
    order_number: str
    user_id: int | None
    status: str
    payment_method: str
    payment_status: str
    customer_name: str | None
    customer_phone: str | None
    customer_email: str | None
    shipping_address: str | None
    items: list[OrderItemDTO]
    subtotal: Decimal
    shipping_fee: Decimal
    total: Decimal
    tracking_number: str | None
    notes: str | None
    order_date: datetime
    shipped_date: datetime | None
    delivered_date: datetime | None
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class OrderStatisticsDTO:
    total_orders: int
    by_status: dict[str, int]
    total_revenue: Decimal


@dataclass(frozen=True)
class InventoryLineDTO:
    product_id: int
    product_name: str
    active: bool
    stock_quantity: int
    low_stock: bool


# --- Mapping ------------------------------------------------------------------

def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        user_id=order.user_id,
        status=order.status.value,
        payment_method=order.payment_method,
        payment_status=order.payment_status.value,
        customer_name=order.customer_name,
        customer_phone=order.customer_phone,
        customer_email=order.customer_email,
        shipping_address=order.shipping_address,
        items=[
            OrderItemDTO(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                product_description=item.product_description,
                category_name=item.category_name,
                product_image_url=item.product_image_url,
                quantity=item.quantity.value,
                unit_price=item.unit_price.amount,
                line_total=item.line_total.amount,
            )
            for item in order.items
        ],
        subtotal=order.subtotal.amount,
        shipping_fee=order.shipping_fee.amount,
        total=order.total.amount,
        tracking_number=order.tracking_number,
        notes=order.notes,
        order_date=order.order_date,
        shipped_date=order.shipped_date,
        delivered_date=order.delivered_date,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
