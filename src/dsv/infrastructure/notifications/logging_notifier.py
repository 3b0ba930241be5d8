"""Notifier that writes every notification to the structured log.

Stands in for the storefront's email and WebSocket channels.
"""

from __future__ import annotations

import structlog

from dsv.application.dto import OrderDTO
from dsv.application.notifications import Notifier
from dsv.domain.model.product import Product

logger = structlog.get_logger(__name__)


class LoggingNotifier(Notifier):

    def notify_order_status(self, order: OrderDTO, message: str) -> None:
        logger.info(
            "notify_order_status",
            order_number=order.order_number,
            user_id=order.user_id,
            status=order.status,
            message=message,
        )

    def notify_low_stock(self, product: Product) -> None:
        logger.warning(
            "notify_low_stock",
            product_id=product.id,
            product_name=product.name,
            stock_quantity=product.stock_quantity,
        )

    def notify_out_of_stock(self, product: Product) -> None:
        logger.warning(
            "notify_out_of_stock", product_id=product.id, product_name=product.name
        )

    def notify_payment_confirmed(self, order: OrderDTO) -> None:
        logger.info(
            "notify_payment_confirmed",
            order_number=order.order_number,
            total=str(order.total),
            payment_method=order.payment_method,
        )

    def notify_order_confirmation(self, order: OrderDTO) -> None:
        logger.info(
            "notify_order_confirmation",
            order_number=order.order_number,
            customer_email=order.customer_email,
            total=str(order.total),
        )
