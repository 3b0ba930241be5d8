"""SQLAlchemy implementation of OrderRepository.

An order is stored as one ``orders`` row plus one ``order_items`` row per
line; items are loaded with a separate query by ``order_id``.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from dsv.domain.model.order import Order, OrderItem
from dsv.domain.model.order_status import OrderStatus, PaymentStatus
from dsv.domain.model.value_objects import Money, Quantity
from dsv.domain.repository.order_repository import OrderRepository
from dsv.infrastructure.persistence.tables import OrderItemRow, OrderRow, as_utc


class SqlOrderRepository(OrderRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        row = self._session.get(OrderRow, order_id)
        return self._to_domain(row) if row is not None else None

    def get_for_update(self, order_id: int) -> Order | None:
        stmt = (
            select(OrderRow)
            .where(OrderRow.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = self._session.execute(stmt).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def get_by_order_number(self, order_number: str) -> Order | None:
        stmt = select(OrderRow).where(OrderRow.order_number == order_number)
        row = self._session.execute(stmt).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def add(self, order: Order) -> None:
        row = OrderRow(order_number=order.order_number)
        self._copy_to_row(order, row)
        self._session.add(row)
        self._session.flush()
        order.id = row.id

        item_rows = [
            OrderItemRow(
                order_id=row.id,
                product_id=item.product_id,
                product_name=item.product_name,
                product_description=item.product_description,
                category_name=item.category_name,
                product_image_url=item.product_image_url,
                quantity=item.quantity.value,
                unit_price=item.unit_price.amount,
            )
            for item in order.items
        ]
        self._session.add_all(item_rows)
        self._session.flush()
        for item, item_row in zip(order.items, item_rows):
            item.id = item_row.id

    def save(self, order: Order) -> None:
        row = self._session.get(OrderRow, order.id)
        if row is None:
            raise ValueError(f"Order {order.id} has not been added")
        self._copy_to_row(order, row)
        self._session.flush()

    def list_by_user(
        self, user_id: int, status: OrderStatus | None = None
    ) -> list[Order]:
        stmt = select(OrderRow).where(OrderRow.user_id == user_id)
        if status is not None:
            stmt = stmt.where(OrderRow.status == status.value)
        stmt = stmt.order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
        return [self._to_domain(row) for row in self._session.execute(stmt).scalars()]

    def count_by_status(self) -> dict[OrderStatus, int]:
        counts = {status: 0 for status in OrderStatus}
        stmt = select(OrderRow.status, func.count()).group_by(OrderRow.status)
        for status, count in self._session.execute(stmt):
            counts[OrderStatus(status)] = count
        return counts

    def total_revenue(self) -> Decimal:
        stmt = select(func.coalesce(func.sum(OrderRow.total_amount), 0)).where(
            OrderRow.payment_status == PaymentStatus.COMPLETED.value,
            OrderRow.status != OrderStatus.CANCELLED.value,
        )
        return Decimal(str(self._session.execute(stmt).scalar_one()))

    # --- Mapping helpers ------------------------------------------------------

    @staticmethod
    def _copy_to_row(order: Order, row: OrderRow) -> None:
        row.user_id = order.user_id
        row.total_amount = order.total_amount.amount
        row.shipping_fee = order.shipping_fee.amount
        row.status = order.status.value
        row.payment_method = order.payment_method
        row.payment_status = order.payment_status.value
        row.customer_name = order.customer_name
        row.customer_phone = order.customer_phone
        row.customer_email = order.customer_email
        row.shipping_address = order.shipping_address
        row.tracking_number = order.tracking_number
        row.notes = order.notes
        row.order_date = order.order_date
        row.shipped_date = order.shipped_date
        row.delivered_date = order.delivered_date
        row.created_at = order.created_at
        row.updated_at = order.updated_at

    def _to_domain(self, row: OrderRow) -> Order:
        stmt = (
            select(OrderItemRow)
            .where(OrderItemRow.order_id == row.id)
            .order_by(OrderItemRow.id)
        )
        items = [
            OrderItem(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                product_description=item.product_description,
                category_name=item.category_name,
                product_image_url=item.product_image_url,
                quantity=Quantity(item.quantity),
                unit_price=Money(item.unit_price),
            )
            for item in self._session.execute(stmt).scalars()
        ]
        return Order(
            id=row.id,
            order_number=row.order_number,
            user_id=row.user_id,
            items=items,
            total_amount=Money(row.total_amount),
            payment_method=row.payment_method,
            status=OrderStatus(row.status),
            shipping_fee=Money(row.shipping_fee),
            payment_status=PaymentStatus(row.payment_status),
            customer_name=row.customer_name,
            customer_phone=row.customer_phone,
            customer_email=row.customer_email,
            shipping_address=row.shipping_address,
            tracking_number=row.tracking_number,
            notes=row.notes,
            order_date=as_utc(row.order_date),
            shipped_date=as_utc(row.shipped_date),
            delivered_date=as_utc(row.delivered_date),
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )
