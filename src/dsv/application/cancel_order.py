"""Application service: Cancel Order use case.

Cancelling puts every line item's quantity back into stock.  The restore
and the status write share one unit of work: if any restore fails, the
order stays as it was.
"""

from __future__ import annotations

import structlog

from dsv.application.dto import OrderDTO, order_to_dto
from dsv.application.notifications import NotificationBatch, Notifier
from dsv.application.unit_of_work import UnitOfWork, UnitOfWorkFactory
from dsv.domain.exceptions import OrderNotFound
from dsv.domain.model.order import Order
from dsv.domain.model.order_status import OrderStatus, assert_transition
from dsv.domain.service.inventory_ledger import InventoryLedger

logger = structlog.get_logger(__name__)

CANCELLED_MESSAGE = "Your order has been cancelled and inventory has been restored."


def load_order_for_update(uow: UnitOfWork, order_id: int) -> Order:
    order = uow.orders.get_for_update(order_id)
    if order is None:
        raise OrderNotFound(order_id)
    return order


def cancel_and_restore(uow: UnitOfWork, order: Order) -> None:
    """Restore stock for every line, then mark the order CANCELLED.

    The transition is checked first so a terminal order never touches stock.
    """
    assert_transition(order.status, OrderStatus.CANCELLED)

    quantities: dict[int, int] = {}
    for item in order.items:
        quantities[item.product_id] = (
            quantities.get(item.product_id, 0) + item.quantity.value
        )
    InventoryLedger(uow.products).restore_all(quantities)

    order.cancel()
    uow.orders.save(order)


class CancelOrderHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory, notifier: Notifier) -> None:
        self._uow_factory = uow_factory
        self._notifier = notifier

    def handle(self, order_id: int, requesting_user_id: int | None) -> OrderDTO:
        """Customer-initiated cancellation of their own order."""
        with self._uow_factory() as uow:
            order = load_order_for_update(uow, order_id)
            order.assert_owned_by(requesting_user_id)
            cancel_and_restore(uow, order)
            uow.commit()

        dto = order_to_dto(order)
        logger.info(
            "order_cancelled",
            order_id=dto.id,
            order_number=dto.order_number,
            user_id=requesting_user_id,
        )

        notifications = NotificationBatch(self._notifier)
        notifications.order_status(dto, CANCELLED_MESSAGE)
        notifications.flush()
        return dto
