"""Tests for order queries and statistics."""

from decimal import Decimal

import pytest

from dsv.application.cancel_order import CancelOrderHandler
from dsv.application.order_statistics import OrderStatisticsHandler
from dsv.application.show_order import ShowOrderHandler
from dsv.application.verify_payment import VerifyPaymentHandler
from dsv.domain.exceptions import OrderNotFound
from tests.builders import BANH_PIA, KEO_DUA, bank_request, catalog, client_item, cod_request, place_order
from tests.fakes import FakeDatabase, RecordingNotifier


@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase(catalog())


class TestShowOrder:

    def test_by_id(self, db):
        placed = place_order(db, RecordingNotifier())
        dto = ShowOrderHandler(db.uow).handle(placed.id)
        assert dto.order_number == placed.order_number
        assert dto.items[0].product_name == "Banh Pia Soc Trang"
        assert dto.items[0].line_total == Decimal("120000")

    def test_by_order_number_is_case_insensitive(self, db):
        placed = place_order(db, RecordingNotifier())
        dto = ShowOrderHandler(db.uow).by_order_number(placed.order_number.lower())
        assert dto.id == placed.id

    def test_missing(self, db):
        handler = ShowOrderHandler(db.uow)
        with pytest.raises(OrderNotFound):
            handler.handle(1)
        with pytest.raises(OrderNotFound, match="DSV000000AAAAAA"):
            handler.by_order_number("DSV000000AAAAAA")

    def test_list_for_user_with_status_filter(self, db):
        notifier = RecordingNotifier()
        first = place_order(db, notifier)
        place_order(db, notifier, bank_request(items=[client_item(KEO_DUA, 1, "45000")]))
        place_order(db, notifier, cod_request(user_id=8, items=[client_item(BANH_PIA, 1, "120000")]))

        handler = ShowOrderHandler(db.uow)
        assert len(handler.list_for_user(7)) == 2
        assert [o.id for o in handler.list_for_user(7, "PROCESSING")] == [first.id]
        assert handler.list_for_user(9) == []


class TestOrderStatistics:

    def test_counts_and_revenue(self, db):
        notifier = RecordingNotifier()
        paid = place_order(db, notifier, bank_request(items=[client_item(BANH_PIA, 1, "120000")]))
        cancelled_paid = place_order(db, notifier, bank_request(items=[client_item(KEO_DUA, 2, "45000")]))
        place_order(db, notifier)

        verify = VerifyPaymentHandler(db.uow, notifier)
        verify.handle(paid.id, Decimal("120000"), "BANK_TRANSFER", "FT1")
        verify.handle(cancelled_paid.id, Decimal("90000"), "BANK_TRANSFER", "FT2")
        CancelOrderHandler(db.uow, notifier).handle(cancelled_paid.id, 7)

        stats = OrderStatisticsHandler(db.uow).handle()

        assert stats.total_orders == 3
        assert stats.by_status["PENDING"] == 1
        assert stats.by_status["PROCESSING"] == 1
        assert stats.by_status["CANCELLED"] == 1
        assert stats.by_status["DELIVERED"] == 0
        assert stats.total_revenue == Decimal("120000")

    def test_empty_store(self, db):
        stats = OrderStatisticsHandler(db.uow).handle()
        assert stats.total_orders == 0
        assert stats.total_revenue == Decimal("0")
