"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items. Status changes go
through ``transition_to`` so the transition table in ``order_status`` is the
only authority on what may happen next.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from dsv.domain.exceptions import InvalidTransition, NotOwner, ValidationError
from dsv.domain.model.order_status import (
    COD,
    TERMINAL_STATES,
    OrderStatus,
    PaymentStatus,
    assert_transition,
    initial_status_for,
)
from dsv.domain.model.value_objects import Money, Quantity


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


@dataclass
class OrderItem:
    """Product snapshot frozen at purchase time.

    Later catalog edits (price, name, image) never reach historical orders.
    """

    product_id: int
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    product_description: str | None = None
    category_name: str | None = None
    product_image_url: str | None = None
    id: int | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


def validate_customer_details(
    payment_method: str | None,
    user_id: int | None,
    customer_name: str | None,
    customer_phone: str | None,
    customer_email: str | None,
    shipping_address: str | None,
) -> None:
    """Checkout preconditions on who is buying and where it ships."""
    if _blank(payment_method):
        raise ValidationError("Payment method is required")

    if payment_method == COD:
        if _blank(customer_name):
            raise ValidationError("Customer name is required for COD orders")
        if _blank(customer_phone):
            raise ValidationError("Customer phone is required for COD orders")
        if _blank(shipping_address):
            raise ValidationError("Shipping address is required for COD orders")

    if user_id is None:
        if _blank(customer_name):
            raise ValidationError("Customer name is required for guest orders")
        if _blank(customer_phone):
            raise ValidationError("Customer phone is required for guest orders")
        if _blank(customer_email):
            raise ValidationError("Customer email is required for guest orders")
        if _blank(shipping_address):
            raise ValidationError("Shipping address is required for guest orders")


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    order_number: str
    user_id: int | None
    items: list[OrderItem]
    total_amount: Money
    payment_method: str
    status: OrderStatus
    shipping_fee: Money = field(default_factory=Money.zero)
    payment_status: PaymentStatus = PaymentStatus.PENDING
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_email: str | None = None
    shipping_address: str | None = None
    tracking_number: str | None = None
    notes: str | None = None
    order_date: datetime = field(default_factory=_utcnow)
    shipped_date: datetime | None = None
    delivered_date: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_number: str,
        user_id: int | None,
        items: list[OrderItem],
        payment_method: str,
        shipping_fee: Money | None = None,
        subtotal: Money | None = None,
        customer_name: str | None = None,
        customer_phone: str | None = None,
        customer_email: str | None = None,
        shipping_address: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> Order:
        """Create a new order, enforcing all invariants.

        ``subtotal`` overrides the item sum; it is only passed for client
        carts whose totals are trusted as submitted.
        """
        validate_customer_details(
            payment_method,
            user_id,
            customer_name,
            customer_phone,
            customer_email,
            shipping_address,
        )
        if not items:
            raise ValidationError("Order must contain at least one item")

        now = now or _utcnow()
        shipping_fee = shipping_fee or Money.zero()

        order = Order(
            id=None,
            order_number=order_number,
            user_id=user_id,
            items=list(items),
            total_amount=Money.zero(),
            payment_method=payment_method,
            status=initial_status_for(payment_method),
            shipping_fee=shipping_fee,
            customer_name=customer_name,
            customer_phone=customer_phone,
            customer_email=customer_email,
            shipping_address=shipping_address,
            notes=notes or None,
            order_date=now,
            created_at=now,
            updated_at=now,
        )
        # Tax is zero for now.
        order.total_amount = (subtotal or order.subtotal) + shipping_fee
        return order

    # --- State transitions ----------------------------------------------------

    def transition_to(self, target: OrderStatus, now: datetime | None = None) -> None:
        """Move to *target* if the transition table allows it.

        Stock restoration for CANCELLED is the caller's job (inventory ledger)
        and must happen in the same unit of work.
        """
        assert_transition(self.status, target)
        now = now or _utcnow()
        self.status = target
        if target == OrderStatus.SHIPPED and self.shipped_date is None:
            self.shipped_date = now
        elif target == OrderStatus.DELIVERED and self.delivered_date is None:
            self.delivered_date = now
        self.updated_at = now

    def cancel(self, now: datetime | None = None) -> None:
        self.transition_to(OrderStatus.CANCELLED, now)

    def confirm_delivery(
        self, requesting_user_id: int | None, now: datetime | None = None
    ) -> None:
        """Customer confirms receipt of a shipped cash-on-delivery order.

        Marks the order DELIVERED and the payment COMPLETED together.
        """
        if not self.is_guest:
            self.assert_owned_by(requesting_user_id)
        if self.status != OrderStatus.SHIPPED:
            raise InvalidTransition(self.status, OrderStatus.DELIVERED)
        if self.payment_method != COD:
            raise ValidationError(
                "Delivery confirmation is only available for COD orders"
            )
        self.transition_to(OrderStatus.DELIVERED, now)
        self.payment_status = PaymentStatus.COMPLETED

    def record_payment(
        self, payment_method: str, transaction_id: str, now: datetime | None = None
    ) -> None:
        self.payment_status = PaymentStatus.COMPLETED
        self.payment_method = payment_method
        self.append_note(
            f"Payment confirmed automatically. Transaction ID: {transaction_id}", now
        )

    def append_note(self, text: str | None, now: datetime | None = None) -> None:
        """Notes are an audit trail: new text is appended, never replaces."""
        if _blank(text):
            return
        text = text.strip()
        self.notes = f"{self.notes}\n{text}" if self.notes else text
        self.updated_at = now or _utcnow()

    def set_tracking_number(self, tracking_number: str) -> None:
        self.tracking_number = tracking_number.strip() or None

    def assert_owned_by(self, user_id: int | None) -> None:
        if self.user_id != user_id:
            raise NotOwner(f"Order {self.order_number} does not belong to user {user_id}")

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def total(self) -> Money:
        return self.total_amount

    @property
    def total_items(self) -> int:
        return sum(item.quantity.value for item in self.items)

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES
