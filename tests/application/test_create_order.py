"""Integration tests for the CreateOrder use case.

Uses the in-memory fake database; no SQL involved.
"""

import threading
from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from dsv.application.unit_of_work import PersistenceError
from dsv.domain.exceptions import (
    CartInvalid,
    EmptyCart,
    InsufficientStock,
    ProductNotFound,
    ProductUnavailable,
    ValidationError,
)
from dsv.domain.model.cart import CartItem
from dsv.domain.model.order_status import OrderStatus
from dsv.domain.model.product import Product
from dsv.domain.model.value_objects import Money
from tests.builders import (
    BANH_PIA,
    KEO_DUA,
    bank_request,
    catalog,
    client_item,
    cod_request,
    create_handler,
)
from tests.fakes import FailingNotifier, FakeDatabase, RecordingNotifier


def _setup(products: list[Product] | None = None, **handler_kwargs):
    db = FakeDatabase(products if products is not None else catalog())
    notifier = RecordingNotifier()
    handler = create_handler(db, notifier, **handler_kwargs)
    return handler, db, notifier


class TestClientCartCheckout:

    def test_creates_order_and_decrements_stock(self):
        handler, db, _ = _setup()
        dto = handler.handle(
            cod_request(
                items=[client_item(BANH_PIA, 2, "120000"), client_item(KEO_DUA, 3, "45000")],
                subtotal=Decimal("375000"),
                shipping_fee=Decimal("30000"),
            )
        )
        assert dto.id == 1
        assert dto.status == "PROCESSING"
        assert dto.payment_status == "PENDING"
        assert dto.total == Decimal("405000")
        assert dto.order_number.startswith("DSV")
        assert db.stock(BANH_PIA) == 48
        assert db.stock(KEO_DUA) == 47

    def test_total_invariant_without_client_subtotal(self):
        handler, db, _ = _setup()
        dto = handler.handle(
            cod_request(items=[client_item(BANH_PIA, 2, "120000")], shipping_fee=Decimal("25000"))
        )
        line_sum = sum(item.quantity * item.unit_price for item in dto.items)
        assert dto.total == line_sum + dto.shipping_fee == Decimal("265000")

    def test_bank_transfer_starts_pending(self):
        handler, _, _ = _setup()
        dto = handler.handle(bank_request(items=[client_item(BANH_PIA, 1, "120000")]))
        assert dto.status == OrderStatus.PENDING.value

    def test_item_snapshot_is_frozen(self):
        handler, db, _ = _setup()
        dto = handler.handle(cod_request(items=[client_item(BANH_PIA, 1, "120000")]))

        with db.uow() as uow:
            uow.products.add(
                Product(id=BANH_PIA, name="Banh Pia (moi)", price=Money.of("150000"), stock_quantity=10)
            )
            uow.commit()

        item = db.order(dto.id).items[0]
        assert item.product_name == "Banh Pia Soc Trang"
        assert item.unit_price == Money.of("120000")
        assert item.category_name == "Banh"

    def test_client_subtotal_is_trusted_and_mismatch_logged(self):
        handler, _, _ = _setup()
        with capture_logs() as logs:
            dto = handler.handle(
                cod_request(items=[client_item(BANH_PIA, 1, "120000")], subtotal=Decimal("100000"))
            )
        assert dto.total == Decimal("100000")
        assert any(entry["event"] == "client_subtotal_mismatch" for entry in logs)

    def test_recompute_client_totals(self):
        handler, _, _ = _setup(recompute_client_totals=True)
        dto = handler.handle(
            cod_request(items=[client_item(BANH_PIA, 1, "120000")], subtotal=Decimal("1"))
        )
        assert dto.total == Decimal("120000")

    def test_guest_checkout(self):
        handler, db, _ = _setup()
        dto = handler.handle(cod_request(user_id=None, items=[client_item(KEO_DUA, 1, "45000")]))
        assert dto.user_id is None
        assert db.order(dto.id).is_guest

    def test_insufficient_stock_on_client_path(self):
        handler, db, _ = _setup(catalog(banh_pia=2))
        with pytest.raises(InsufficientStock) as exc_info:
            handler.handle(cod_request(items=[client_item(BANH_PIA, 3, "120000")]))
        assert (exc_info.value.available, exc_info.value.requested) == (2, 3)
        assert db.orders() == []
        assert db.stock(BANH_PIA) == 2

    def test_failure_on_second_line_restores_first(self):
        handler, db, _ = _setup(catalog(banh_pia=10, keo_dua=1))
        with pytest.raises(InsufficientStock):
            handler.handle(
                cod_request(items=[client_item(BANH_PIA, 5, "120000"), client_item(KEO_DUA, 2, "45000")])
            )
        assert db.stock(BANH_PIA) == 10
        assert db.orders() == []

    def test_unknown_product(self):
        handler, db, _ = _setup()
        with pytest.raises(ProductNotFound):
            handler.handle(cod_request(items=[client_item(99, 1, "1000")]))
        assert db.orders() == []


class TestPersistedCartCheckout:

    def _with_cart(self, *lines, products=None):
        handler, db, notifier = _setup(products)
        for product_id, qty, price in lines:
            db.add_cart_item(CartItem(user_id=7, product_id=product_id, quantity=qty, unit_price=Money.of(price)))
        return handler, db, notifier

    def test_uses_cart_prices_and_clears_cart(self):
        handler, db, _ = self._with_cart((BANH_PIA, 2, "110000"), (KEO_DUA, 1, "45000"))
        dto = handler.handle(bank_request(shipping_fee=Decimal("30000")))
        assert dto.total == Decimal("295000")
        assert db.cart(7) == []
        assert db.stock(BANH_PIA) == 48

    def test_insufficient_stock_scenario(self):
        # Product with stock 2, cart asks for 3.
        handler, db, _ = self._with_cart((BANH_PIA, 3, "120000"), products=catalog(banh_pia=2))
        with pytest.raises(CartInvalid) as exc_info:
            handler.handle(cod_request())
        err = exc_info.value
        assert isinstance(err, InsufficientStock)
        assert err.product_id == BANH_PIA
        assert "Available: 2, Requested: 3" in str(err)
        assert db.orders() == []
        assert db.stock(BANH_PIA) == 2
        assert len(db.cart(7)) == 1

    def test_duplicate_lines_are_checked_together(self):
        handler, db, _ = self._with_cart(
            (BANH_PIA, 2, "120000"), (BANH_PIA, 2, "120000"), products=catalog(banh_pia=3)
        )
        with pytest.raises(InsufficientStock) as exc_info:
            handler.handle(cod_request())
        assert exc_info.value.requested == 4

    def test_inactive_product_rejected(self):
        products = catalog()
        products[0].active = False
        handler, db, _ = self._with_cart((BANH_PIA, 1, "120000"), products=products)
        with pytest.raises(ProductUnavailable):
            handler.handle(cod_request())
        assert db.orders() == []

    def test_empty_cart(self):
        handler, _, _ = _setup()
        with pytest.raises(EmptyCart):
            handler.handle(cod_request())

    def test_cart_clear_failure_does_not_fail_order(self):
        handler, db, _ = self._with_cart((BANH_PIA, 1, "120000"))
        db.fail_cart_clear = True
        with capture_logs() as logs:
            dto = handler.handle(cod_request())
        assert db.order(dto.id).status == OrderStatus.PROCESSING
        assert len(db.cart(7)) == 1
        assert any(entry["event"] == "cart_clear_failed" for entry in logs)


class TestValidation:

    def test_cod_without_phone_writes_nothing(self):
        handler, db, _ = _setup()
        with pytest.raises(ValidationError, match="phone"):
            handler.handle(cod_request(items=[client_item(BANH_PIA, 1, "120000")], customer_phone=None))
        assert db.stock(BANH_PIA) == 50
        assert db.commits == 0

    def test_guest_without_email(self):
        handler, _, _ = _setup()
        with pytest.raises(ValidationError, match="email"):
            handler.handle(
                cod_request(user_id=None, items=[client_item(BANH_PIA, 1, "120000")], customer_email="")
            )

    def test_missing_payment_method(self):
        handler, _, _ = _setup()
        with pytest.raises(ValidationError, match="Payment method"):
            handler.handle(cod_request(items=[client_item(BANH_PIA, 1, "120000")], payment_method=""))


class TestAtomicityAndNotifications:

    def test_commit_failure_leaves_no_trace(self):
        handler, db, notifier = _setup()
        db.fail_next_commit = True
        with pytest.raises(PersistenceError):
            handler.handle(cod_request(items=[client_item(BANH_PIA, 1, "120000")]))
        assert db.orders() == []
        assert db.stock(BANH_PIA) == 50
        assert notifier.calls == []

    def test_confirmation_and_stock_alerts_sent(self):
        handler, _, notifier = _setup(catalog(banh_pia=11, keo_dua=2))
        handler.handle(
            cod_request(items=[client_item(BANH_PIA, 2, "120000"), client_item(KEO_DUA, 2, "45000")])
        )
        assert notifier.kinds() == ["order_confirmation", "low_stock", "out_of_stock"]
        assert ("low_stock", BANH_PIA, 9) in notifier.calls
        assert ("out_of_stock", KEO_DUA, 0) in notifier.calls

    def test_failing_notifier_does_not_fail_checkout(self):
        db = FakeDatabase(catalog())
        handler = create_handler(db, FailingNotifier())
        with capture_logs() as logs:
            dto = handler.handle(cod_request(items=[client_item(BANH_PIA, 1, "120000")]))
        assert db.order(dto.id) is not None
        assert [e["event"] for e in logs].count("notification_failed") == 1


class TestConcurrency:

    def test_two_buyers_for_the_last_unit(self):
        handler, db, _ = _setup(catalog(banh_pia=1))
        results: list[object] = []
        barrier = threading.Barrier(2)

        def buy(user_id: int) -> None:
            barrier.wait()
            try:
                results.append(
                    handler.handle(cod_request(user_id=user_id, items=[client_item(BANH_PIA, 1, "120000")]))
                )
            except InsufficientStock as exc:
                results.append(exc)

        threads = [threading.Thread(target=buy, args=(uid,)) for uid in (7, 8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        failures = [r for r in results if isinstance(r, InsufficientStock)]
        assert len(results) == 2
        assert len(failures) == 1
        assert len(db.orders()) == 1
        assert db.stock(BANH_PIA) == 0
