"""Application service: Show Order use cases (queries)."""

from __future__ import annotations

from dsv.application.dto import OrderDTO, order_to_dto
from dsv.application.unit_of_work import UnitOfWorkFactory
from dsv.domain.exceptions import OrderNotFound
from dsv.domain.model.order_status import OrderStatus, parse_status


class ShowOrderHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, order_id: int) -> OrderDTO:
        with self._uow_factory() as uow:
            order = uow.orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order_to_dto(order)

    def by_order_number(self, order_number: str) -> OrderDTO:
        with self._uow_factory() as uow:
            order = uow.orders.get_by_order_number(order_number.strip().upper())
        if order is None:
            raise OrderNotFound(order_number)
        return order_to_dto(order)

    def list_for_user(
        self, user_id: int, status: OrderStatus | str | None = None
    ) -> list[OrderDTO]:
        """A user's orders, newest first, optionally filtered by status."""
        wanted = parse_status(status) if status is not None else None
        with self._uow_factory() as uow:
            orders = uow.orders.list_by_user(user_id, wanted)
        return [order_to_dto(order) for order in orders]
