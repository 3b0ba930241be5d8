"""Application service: Confirm Delivery of a cash-on-delivery order.

Orchestrates the Order aggregate's guarded ``confirm_delivery`` transition:
the status and the payment status change together or not at all.
"""

from __future__ import annotations

import structlog

from dsv.application.cancel_order import load_order_for_update
from dsv.application.dto import OrderDTO, order_to_dto
from dsv.application.notifications import NotificationBatch, Notifier
from dsv.application.unit_of_work import UnitOfWorkFactory

logger = structlog.get_logger(__name__)

DELIVERY_CONFIRMED_MESSAGE = (
    "Thank you for confirming receipt. Your order is now complete."
)


class ConfirmDeliveryHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, notifier: Notifier) -> None:
        self._uow_factory = uow_factory
        self._notifier = notifier

    def handle(self, order_id: int, requesting_user_id: int | None) -> OrderDTO:
        with self._uow_factory() as uow:
            order = load_order_for_update(uow, order_id)
            order.confirm_delivery(requesting_user_id)
            uow.orders.save(order)
            uow.commit()

        dto = order_to_dto(order)
        logger.info(
            "delivery_confirmed",
            order_id=dto.id,
            order_number=dto.order_number,
            user_id=requesting_user_id,
        )

        notifications = NotificationBatch(self._notifier)
        notifications.order_status(dto, DELIVERY_CONFIRMED_MESSAGE)
        notifications.flush()
        return dto
