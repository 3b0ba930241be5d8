"""Application service: order statistics for the admin dashboard."""

from __future__ import annotations

from dsv.application.dto import OrderStatisticsDTO
from dsv.application.unit_of_work import UnitOfWorkFactory
from dsv.domain.model.order_status import OrderStatus


class OrderStatisticsHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self) -> OrderStatisticsDTO:
        with self._uow_factory() as uow:
            counts = uow.orders.count_by_status()
            revenue = uow.orders.total_revenue()

        by_status = {status.value: counts.get(status, 0) for status in OrderStatus}
        return OrderStatisticsDTO(
            total_orders=sum(by_status.values()),
            by_status=by_status,
            total_revenue=revenue,
        )
