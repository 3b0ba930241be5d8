"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from dsv.domain.model.order import Order
from dsv.domain.model.order_status import OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_for_update(self, order_id: int) -> Order | None:
        """Return an order and lock its row until the transaction ends."""

    @abstractmethod
    def get_by_order_number(self, order_number: str) -> Order | None:
        """Return an order by its human-facing number, or None."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Insert a new order with its items; assigns ``order.id`` and item IDs."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist the mutable fields of an existing order."""

    @abstractmethod
    def list_by_user(
        self, user_id: int, status: OrderStatus | None = None
    ) -> list[Order]:
        """Return a user's orders, newest first."""

    @abstractmethod
    def count_by_status(self) -> dict[OrderStatus, int]:
        """Return the number of orders per status (zero counts included)."""

    @abstractmethod
    def total_revenue(self) -> Decimal:
        """Sum of totals of paid, non-cancelled orders."""
