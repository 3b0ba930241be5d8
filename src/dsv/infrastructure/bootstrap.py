"""Composition root: wires concrete implementations to the application layer.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from dsv.application.cancel_order import CancelOrderHandler
from dsv.application.confirm_delivery import ConfirmDeliveryHandler
from dsv.application.create_order import CreateOrderHandler
from dsv.application.list_payment_discrepancies import ListPaymentDiscrepanciesHandler
from dsv.application.notifications import Notifier
from dsv.application.order_statistics import OrderStatisticsHandler
from dsv.application.process_payment_webhook import ProcessPaymentWebhookHandler
from dsv.application.set_stock import SetStockHandler
from dsv.application.show_inventory import ShowInventoryHandler
from dsv.application.show_order import ShowOrderHandler
from dsv.application.unit_of_work import UnitOfWorkFactory
from dsv.application.update_order_status import UpdateOrderStatusHandler
from dsv.application.verify_payment import VerifyPaymentHandler
from dsv.domain.service.order_number import OrderNumberGenerator
from dsv.infrastructure.config import Settings
from dsv.infrastructure.notifications.logging_notifier import LoggingNotifier
from dsv.infrastructure.persistence.unit_of_work import (
    SqlAlchemyUnitOfWork,
    make_engine,
    session_factory,
)


@lru_cache(maxsize=1)
def settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=1)
def engine() -> Engine:
    return make_engine(settings().database_url)


def sessions() -> sessionmaker[Session]:
    return session_factory(engine())


def uow_factory() -> UnitOfWorkFactory:
    factory = sessions()
    return lambda: SqlAlchemyUnitOfWork(factory)


def notifier() -> Notifier:
    return LoggingNotifier()


def create_order_handler() -> CreateOrderHandler:
    config = settings()
    return CreateOrderHandler(
        uow_factory(),
        notifier(),
        order_numbers=OrderNumberGenerator(tz=config.tzinfo),
        low_stock_threshold=config.low_stock_threshold,
        recompute_client_totals=config.recompute_client_totals,
    )


def cancel_order_handler() -> CancelOrderHandler:
    return CancelOrderHandler(uow_factory(), notifier())


def update_order_status_handler() -> UpdateOrderStatusHandler:
    return UpdateOrderStatusHandler(uow_factory(), notifier())


def confirm_delivery_handler() -> ConfirmDeliveryHandler:
    return ConfirmDeliveryHandler(uow_factory(), notifier())


def verify_payment_handler() -> VerifyPaymentHandler:
    return VerifyPaymentHandler(
        uow_factory(), notifier(), tolerance=settings().payment_tolerance
    )


def payment_webhook_handler() -> ProcessPaymentWebhookHandler:
    return ProcessPaymentWebhookHandler(verify_payment_handler())


def show_order_handler() -> ShowOrderHandler:
    return ShowOrderHandler(uow_factory())


def order_statistics_handler() -> OrderStatisticsHandler:
    return OrderStatisticsHandler(uow_factory())


def set_stock_handler() -> SetStockHandler:
    return SetStockHandler(uow_factory())


def show_inventory_handler() -> ShowInventoryHandler:
    return ShowInventoryHandler(
        uow_factory(), low_stock_threshold=settings().low_stock_threshold
    )


def list_discrepancies_handler() -> ListPaymentDiscrepanciesHandler:
    return ListPaymentDiscrepanciesHandler(uow_factory())
