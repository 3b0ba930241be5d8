"""Tests for payment reconciliation."""

from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from dsv.application.cancel_order import CancelOrderHandler
from dsv.application.list_payment_discrepancies import ListPaymentDiscrepanciesHandler
from dsv.application.verify_payment import VerifyPaymentHandler
from dsv.domain.exceptions import ReconciliationError
from dsv.domain.model.order_status import OrderStatus, PaymentStatus
from tests.builders import BANH_PIA, bank_request, catalog, client_item, place_order
from tests.fakes import FailingNotifier, FakeDatabase, RecordingNotifier


def _setup(notifier=None):
    db = FakeDatabase(catalog())
    notifier = notifier or RecordingNotifier()
    order = place_order(
        db,
        RecordingNotifier(),
        bank_request(
            items=[client_item(BANH_PIA, 4, "125000")],
            subtotal=Decimal("500000"),
            notes="Giao buoi sang",
        ),
    )
    return VerifyPaymentHandler(db.uow, notifier), db, notifier, order


class TestVerifyPayment:

    def test_within_tolerance_is_accepted(self):
        handler, db, notifier, order = _setup()

        assert handler.handle(order.id, Decimal("499500"), "BANK_TRANSFER", "FT001") is True

        stored = db.order(order.id)
        assert stored.payment_status == PaymentStatus.COMPLETED
        assert stored.payment_method == "BANK_TRANSFER"
        assert stored.notes == (
            "Giao buoi sang\nPayment confirmed automatically. Transaction ID: FT001"
        )
        assert notifier.kinds() == ["payment_confirmed"]

    def test_payment_does_not_change_order_status(self):
        handler, db, _, order = _setup()
        handler.handle(order.id, Decimal("500000"), "BANK_TRANSFER", "FT001")
        assert db.order(order.id).status == OrderStatus.PENDING

    def test_outside_tolerance_is_rejected_and_recorded(self):
        handler, db, notifier, order = _setup()

        with capture_logs() as logs:
            applied = handler.handle(order.id, Decimal("495000"), "BANK_TRANSFER", "FT002", "DH1")

        assert applied is False
        stored = db.order(order.id)
        assert stored.status == OrderStatus.PENDING
        assert stored.payment_status == PaymentStatus.PENDING
        assert stored.notes == "Giao buoi sang"

        [record] = db.discrepancies()
        assert record.reason == "AMOUNT_MISMATCH"
        assert record.expected_amount == Decimal("500000")
        assert record.received_amount == Decimal("495000")
        assert record.transaction_id == "FT002"
        assert record.description == "DH1"

        mismatch = [e for e in logs if e["event"] == "payment_amount_mismatch"]
        assert mismatch and mismatch[0]["log_level"] == "error"
        assert notifier.calls == []

    def test_exact_tolerance_boundary_is_accepted(self):
        handler, _, _, order = _setup()
        assert handler.handle(order.id, Decimal("501000"), "BANK_TRANSFER", "FT003") is True

    def test_custom_tolerance(self):
        db = FakeDatabase(catalog())
        order = place_order(db, RecordingNotifier(), bank_request(items=[client_item(BANH_PIA, 1, "120000")]))
        handler = VerifyPaymentHandler(db.uow, RecordingNotifier(), tolerance=Decimal("0"))
        assert handler.handle(order.id, Decimal("119999"), "BANK_TRANSFER", "FT004") is False

    def test_idempotent_redelivery(self):
        handler, db, notifier, order = _setup()
        assert handler.handle(order.id, Decimal("500000"), "BANK_TRANSFER", "FT001")
        notes_after_first = db.order(order.id).notes
        commits_after_first = db.commits

        assert handler.handle(order.id, Decimal("500000"), "BANK_TRANSFER", "FT001") is True

        assert db.order(order.id).notes == notes_after_first
        assert db.commits == commits_after_first
        assert notifier.kinds() == ["payment_confirmed"]

    def test_unknown_order(self):
        handler, db, _, _ = _setup()
        assert handler.handle(999, Decimal("500000"), "BANK_TRANSFER", "FT005") is False
        assert db.discrepancies() == []

    def test_cancelled_order_rejected(self):
        handler, db, _, order = _setup()
        CancelOrderHandler(db.uow, RecordingNotifier()).handle(order.id, 7)

        assert handler.handle(order.id, Decimal("500000"), "BANK_TRANSFER", "FT006") is False
        assert db.order(order.id).payment_status == PaymentStatus.PENDING
        assert [d.reason for d in db.discrepancies()] == ["ORDER_CANCELLED"]

    def test_store_failure_raises_reconciliation_error(self):
        handler, db, _, order = _setup()
        db.fail_next_commit = True
        with pytest.raises(ReconciliationError):
            handler.handle(order.id, Decimal("500000"), "BANK_TRANSFER", "FT007")
        assert db.order(order.id).payment_status == PaymentStatus.PENDING

    def test_failing_notifier_does_not_undo_payment(self):
        handler, db, _, order = _setup(FailingNotifier())
        assert handler.handle(order.id, Decimal("500000"), "BANK_TRANSFER", "FT008") is True
        assert db.order(order.id).is_paid


class TestListPaymentDiscrepancies:

    def test_lists_rejected_payments(self):
        handler, db, _, order = _setup()
        handler.handle(order.id, Decimal("10000"), "BANK_TRANSFER", "FT009")
        handler.handle(order.id, Decimal("20000"), "BANK_TRANSFER", "FT010")

        records = ListPaymentDiscrepanciesHandler(db.uow).handle()

        assert [r.transaction_id for r in records] == ["FT009", "FT010"]
        assert all(r.order_id == order.id for r in records)

    def test_empty_when_nothing_rejected(self):
        db = FakeDatabase(catalog())
        assert ListPaymentDiscrepanciesHandler(db.uow).handle() == []


class TestInvalidAmounts:

    @pytest.mark.parametrize("amount", ["NaN", "sNaN", "Infinity", "-Infinity"])
    def test_non_finite_amount_is_rejected_and_recorded(self, amount):
        handler, db, notifier, order = _setup()

        assert handler.handle(order.id, Decimal(amount), "BANK_TRANSFER", "FT011") is False

        assert db.order(order.id).payment_status == PaymentStatus.PENDING
        [record] = db.discrepancies()
        assert record.reason == "INVALID_AMOUNT"
        assert record.received_amount is None
        assert notifier.calls == []

    def test_unparsable_amount_is_rejected(self):
        handler, db, _, order = _setup()
        assert handler.handle(order.id, "abc", "BANK_TRANSFER", "FT012") is False
        assert [d.reason for d in db.discrepancies()] == ["INVALID_AMOUNT"]

    def test_negative_amount_is_rejected(self):
        handler, db, _, order = _setup()
        with capture_logs() as logs:
            assert handler.handle(order.id, Decimal("-500000"), "BANK_TRANSFER", "FT013") is False
        [record] = db.discrepancies()
        assert (record.reason, record.received_amount) == ("INVALID_AMOUNT", Decimal("-500000"))
        assert any(e["event"] == "payment_amount_invalid" for e in logs)

    def test_valid_payment_after_invalid_one_is_applied(self):
        handler, db, _, order = _setup()
        handler.handle(order.id, Decimal("NaN"), "BANK_TRANSFER", "FT014")
        assert handler.handle(order.id, Decimal("500000"), "BANK_TRANSFER", "FT015") is True
        assert db.order(order.id).is_paid
