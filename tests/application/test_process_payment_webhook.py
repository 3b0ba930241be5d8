"""Tests for bank-transfer webhook intake."""

import json
from decimal import Decimal

import pytest

from dsv.application.process_payment_webhook import (
    ProcessPaymentWebhookHandler,
    extract_order_id,
)
from dsv.application.verify_payment import VerifyPaymentHandler
from dsv.domain.exceptions import ValidationError
from tests.builders import BANH_PIA, bank_request, catalog, client_item, place_order
from tests.fakes import FakeDatabase, RecordingNotifier


def _setup():
    db = FakeDatabase(catalog())
    order = place_order(db, RecordingNotifier(), bank_request(items=[client_item(BANH_PIA, 1, "120000")]))
    handler = ProcessPaymentWebhookHandler(VerifyPaymentHandler(db.uow, RecordingNotifier()))
    return handler, db, order


def _transaction(description: str, amount=120000, tid: str = "FT24360001") -> dict:
    return {
        "id": 1,
        "tid": tid,
        "description": description,
        "amount": amount,
        "when": "2024-12-25 10:00:00",
        "bankName": "VCB",
    }


@pytest.mark.parametrize(
    "description,expected",
    [
        ("DH1", 1),
        ("dh 42 thanh toan", 42),
        ("Don hang DH123", 123),
        ("CK tien hang", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_order_id(description, expected):
    assert extract_order_id(description) == expected


class TestWebhook:

    def test_matching_transaction_is_applied(self):
        handler, db, order = _setup()
        result = handler.handle({"error": 0, "data": [_transaction(f"Don hang DH{order.id}")]})

        assert (result.received, result.processed) == (1, 1)
        assert result.outcomes[0].outcome == "APPLIED"
        stored = db.order(order.id)
        assert stored.is_paid
        assert stored.payment_method == "BANK_TRANSFER"
        assert "Transaction ID: FT24360001" in stored.notes

    def test_accepts_json_text(self):
        handler, db, order = _setup()
        payload = json.dumps({"error": 0, "data": [_transaction(f"DH{order.id}")]})
        assert handler.handle(payload).processed == 1

    def test_transactions_without_reference_are_skipped(self):
        handler, _, order = _setup()
        result = handler.handle(
            {"error": 0, "data": [_transaction("chuyen tien"), _transaction(f"DH{order.id}", tid="FT2")]}
        )
        assert [o.outcome for o in result.outcomes] == ["SKIPPED", "APPLIED"]
        assert result.processed == 1

    def test_amount_mismatch_is_rejected(self):
        handler, db, order = _setup()
        result = handler.handle({"error": 0, "data": [_transaction(f"DH{order.id}", amount=100000)]})
        assert result.outcomes[0].outcome == "REJECTED"
        assert db.discrepancies()[0].received_amount == Decimal("100000")

    @pytest.mark.parametrize("amount", ["NaN", "sNaN", "Infinity"])
    def test_non_finite_amount_does_not_stop_the_batch(self, amount):
        handler, db, order = _setup()
        result = handler.handle(
            {
                "error": 0,
                "data": [
                    _transaction(f"DH{order.id}", amount=amount, tid="T1"),
                    _transaction(f"DH{order.id}", amount=120000, tid="T2"),
                ],
            }
        )

        assert [o.outcome for o in result.outcomes] == ["REJECTED", "APPLIED"]
        assert result.processed == 1
        assert db.order(order.id).is_paid
        assert [d.reason for d in db.discrepancies()] == ["INVALID_AMOUNT"]

    def test_unparsable_amount_is_rejected(self):
        handler, db, order = _setup()
        result = handler.handle({"error": 0, "data": [_transaction(f"DH{order.id}", amount="abc")]})
        assert result.outcomes[0].outcome == "REJECTED"
        assert not db.order(order.id).is_paid

    def test_empty_data(self):
        handler, _, _ = _setup()
        result = handler.handle({"error": 0, "data": []})
        assert (result.received, result.processed) == (0, 0)

    @pytest.mark.parametrize("payload", [{"error": 1, "data": []}, {"data": []}, "not json", "[]"])
    def test_invalid_payload(self, payload):
        handler, _, _ = _setup()
        with pytest.raises(ValidationError, match="Invalid webhook data"):
            handler.handle(payload)
