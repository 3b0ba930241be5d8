"""Application service: Payment Reconciliation.

Matches an already-authenticated payment confirmation against the order it
names.  Business rejections (unknown order, invalid amount, cancelled
order, amount outside tolerance) return ``False`` and leave the order
untouched; only store failures raise, as ``ReconciliationError``.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import structlog

from dsv.application.dto import order_to_dto
from dsv.application.notifications import NotificationBatch, Notifier
from dsv.application.unit_of_work import PersistenceError, UnitOfWork, UnitOfWorkFactory
from dsv.domain.exceptions import ReconciliationError
from dsv.domain.model.order import Order
from dsv.domain.model.order_status import OrderStatus
from dsv.domain.model.payment import PaymentDiscrepancy, PaymentEvent
from dsv.domain.model.value_objects import Money

logger = structlog.get_logger(__name__)

DEFAULT_TOLERANCE = Decimal("1000")

REASON_CANCELLED = "ORDER_CANCELLED"
REASON_AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
REASON_INVALID_AMOUNT = "INVALID_AMOUNT"


class VerifyPaymentHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        notifier: Notifier,
        tolerance: Decimal = DEFAULT_TOLERANCE,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifier = notifier
        self._tolerance = tolerance

    def handle(
        self,
        order_id: int,
        amount: Decimal,
        payment_method: str,
        transaction_id: str,
        description: str = "",
    ) -> bool:
        event = PaymentEvent(
            order_id=order_id,
            amount=_finite_amount(amount),
            payment_method=payment_method,
            transaction_id=transaction_id,
            description=description,
        )
        if event.amount is None:
            logger.warning(
                "payment_amount_not_finite", amount=str(amount), transaction_id=transaction_id
            )
        try:
            return self._apply(event)
        except PersistenceError as exc:
            raise ReconciliationError(
                f"Could not reconcile payment {transaction_id} for order {order_id}"
            ) from exc

    def _apply(self, event: PaymentEvent) -> bool:
        with self._uow_factory() as uow:
            order = uow.orders.get_for_update(event.order_id)
            if order is None:
                logger.warning(
                    "payment_order_not_found",
                    order_id=event.order_id,
                    transaction_id=event.transaction_id,
                )
                return False

            if event.amount is None or event.amount < 0:
                self._record_discrepancy(uow, order, event, REASON_INVALID_AMOUNT)
                logger.error(
                    "payment_amount_invalid",
                    order_id=order.id,
                    order_number=order.order_number,
                    received=str(event.amount),
                    transaction_id=event.transaction_id,
                )
                return False

            if order.is_paid:
                logger.info(
                    "payment_already_applied",
                    order_id=order.id,
                    order_number=order.order_number,
                    transaction_id=event.transaction_id,
                )
                return True

            if order.status == OrderStatus.CANCELLED:
                self._record_discrepancy(uow, order, event, REASON_CANCELLED)
                logger.error(
                    "payment_for_cancelled_order",
                    order_id=order.id,
                    order_number=order.order_number,
                    amount=str(event.amount),
                    transaction_id=event.transaction_id,
                )
                return False

            expected = order.total.amount
            received = Money(event.amount, order.total.currency)
            if order.total.difference(received) > self._tolerance:
                self._record_discrepancy(uow, order, event, REASON_AMOUNT_MISMATCH)
                logger.error(
                    "payment_amount_mismatch",
                    order_id=order.id,
                    order_number=order.order_number,
                    expected=str(expected),
                    received=str(event.amount),
                    transaction_id=event.transaction_id,
                )
                return False

            order.record_payment(event.payment_method, event.transaction_id)
            uow.orders.save(order)
            uow.commit()

        dto = order_to_dto(order)
        logger.info(
            "payment_verified",
            order_id=dto.id,
            order_number=dto.order_number,
            amount=str(event.amount),
            payment_method=event.payment_method,
            transaction_id=event.transaction_id,
        )

        notifications = NotificationBatch(self._notifier)
        notifications.payment_confirmed(dto)
        notifications.flush()
        return True

    @staticmethod
    def _record_discrepancy(
        uow: UnitOfWork, order: Order, event: PaymentEvent, reason: str
    ) -> None:
        # The order row is not written; only the review record is committed.
        uow.discrepancies.add(
            PaymentDiscrepancy(
                order_id=event.order_id,
                expected_amount=order.total.amount,
                received_amount=event.amount,
                payment_method=event.payment_method,
                transaction_id=event.transaction_id,
                reason=reason,
                description=event.description,
            )
        )
        uow.commit()


def _finite_amount(raw: Decimal | str | int | float) -> Decimal | None:
    """The amount as a Decimal, or None when it is not a finite number."""
    try:
        amount = Decimal(str(raw))
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None
