"""Notifier port and post-commit dispatch.

Delivery (email, WebSocket) is someone else's job.  Checkout only queues
calls on a NotificationBatch while the unit of work is open and flushes the
batch after commit.  A failing notifier is logged and never surfaces as a
checkout failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable

import structlog

from dsv.application.dto import OrderDTO
from dsv.domain.model.product import Product
from dsv.domain.service.inventory_ledger import StockAlert, StockAlertKind

logger = structlog.get_logger(__name__)


class Notifier(ABC):

    @abstractmethod
    def notify_order_status(self, order: OrderDTO, message: str) -> None:
        """Tell the customer their order changed state."""

    @abstractmethod
    def notify_low_stock(self, product: Product) -> None:
        """Tell admins a product dropped to the low-stock threshold."""

    @abstractmethod
    def notify_out_of_stock(self, product: Product) -> None:
        """Tell admins a product sold out."""

    @abstractmethod
    def notify_payment_confirmed(self, order: OrderDTO) -> None:
        """Tell the customer their payment was received."""

    @abstractmethod
    def notify_order_confirmation(self, order: OrderDTO) -> None:
        """Send the order confirmation for a new order."""


class NotificationBatch:
    """Deferred notifier calls, run after the transaction has committed."""

    def __init__(self, notifier: Notifier) -> None:
        self._notifier = notifier
        self._pending: list[tuple[str, Callable[[], None]]] = []

    def order_status(self, order: OrderDTO, message: str) -> None:
        self._add("order_status", lambda: self._notifier.notify_order_status(order, message))

    def order_confirmation(self, order: OrderDTO) -> None:
        self._add("order_confirmation", lambda: self._notifier.notify_order_confirmation(order))

    def payment_confirmed(self, order: OrderDTO) -> None:
        self._add("payment_confirmed", lambda: self._notifier.notify_payment_confirmed(order))

    def stock_alerts(self, alerts: Iterable[StockAlert]) -> None:
        for alert in alerts:
            product = alert.product
            if alert.kind == StockAlertKind.OUT_OF_STOCK:
                self._add("out_of_stock", lambda p=product: self._notifier.notify_out_of_stock(p))
            else:
                self._add("low_stock", lambda p=product: self._notifier.notify_low_stock(p))

    def flush(self) -> None:
        pending, self._pending = self._pending, []
        for kind, send in pending:
            try:
                send()
            except Exception:
                logger.exception("notification_failed", kind=kind)

    def _add(self, kind: str, send: Callable[[], None]) -> None:
        self._pending.append((kind, send))
