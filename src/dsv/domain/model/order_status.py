"""Order state machine: statuses, legal transitions and status messages."""

from __future__ import annotations

from enum import Enum

from dsv.domain.exceptions import InvalidTransition, ValidationError

COD = "COD"


class OrderStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


_VALID_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),  # Terminal
    OrderStatus.CANCELLED: frozenset(),  # Terminal
}

TERMINAL_STATES = frozenset(
    status for status, targets in _VALID_TRANSITIONS.items() if not targets
)

_STATUS_MESSAGES = {
    OrderStatus.CONFIRMED: "Your order has been confirmed and is being prepared for shipment.",
    OrderStatus.SHIPPED: "Your order has been shipped and is on its way to you.",
    OrderStatus.DELIVERED: "Your order has been delivered successfully. Thank you for your purchase!",
    OrderStatus.CANCELLED: "Your order has been cancelled.",
}


def allowed_transitions(current: OrderStatus) -> frozenset[OrderStatus]:
    return _VALID_TRANSITIONS[current]


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _VALID_TRANSITIONS[current]


def assert_transition(current: OrderStatus, target: OrderStatus) -> None:
    """Raise InvalidTransition unless *current* -> *target* is in the table."""
    if not can_transition(current, target):
        raise InvalidTransition(current, target)


def initial_status_for(payment_method: str) -> OrderStatus:
    """Cash-on-delivery orders skip the confirmation step."""
    if payment_method == COD:
        return OrderStatus.PROCESSING
    return OrderStatus.PENDING


def status_change_message(status: OrderStatus) -> str:
    return _STATUS_MESSAGES.get(status, "Your order status has been updated.")


def parse_status(raw: str | OrderStatus) -> OrderStatus:
    if isinstance(raw, OrderStatus):
        return raw
    try:
        return OrderStatus(raw.strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown order status: {raw!r}") from None
