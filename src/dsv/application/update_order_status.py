"""Application service: Update Order Status (administrative)."""

from __future__ import annotations

import structlog

from dsv.application.cancel_order import cancel_and_restore, load_order_for_update
from dsv.application.dto import OrderDTO, order_to_dto
from dsv.application.notifications import NotificationBatch, Notifier
from dsv.application.unit_of_work import UnitOfWorkFactory
from dsv.domain.model.order_status import (
    OrderStatus,
    parse_status,
    status_change_message,
)

logger = structlog.get_logger(__name__)


class UpdateOrderStatusHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, notifier: Notifier) -> None:
        self._uow_factory = uow_factory
        self._notifier = notifier

    def handle(
        self,
        order_id: int,
        new_status: OrderStatus | str,
        tracking_number: str | None = None,
        notes: str | None = None,
    ) -> OrderDTO:
        """Move an order along the status table.

        A move to CANCELLED restores stock exactly like a customer
        cancellation.  Notes are appended to the order's audit trail.
        """
        target = parse_status(new_status)

        with self._uow_factory() as uow:
            order = load_order_for_update(uow, order_id)
            previous = order.status

            if target == OrderStatus.CANCELLED:
                cancel_and_restore(uow, order)
            else:
                order.transition_to(target)

            if tracking_number is not None:
                order.set_tracking_number(tracking_number)
            order.append_note(notes)
            uow.orders.save(order)
            uow.commit()

        dto = order_to_dto(order)
        logger.info(
            "order_status_changed",
            order_id=dto.id,
            order_number=dto.order_number,
            previous=previous.value,
            status=dto.status,
            tracking_number=dto.tracking_number,
        )

        notifications = NotificationBatch(self._notifier)
        notifications.order_status(dto, status_change_message(target))
        notifications.flush()
        return dto
