"""Unit of Work port.

Every use case that writes runs inside one::

    with self._uow_factory() as uow:
        ...
        uow.commit()

Leaving the block without ``commit()`` (normally or through an exception)
rolls everything back, so a failed checkout never leaves a partial order
or a partial stock decrement behind.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from dsv.domain.repository.cart_repository import CartRepository
from dsv.domain.repository.order_repository import OrderRepository
from dsv.domain.repository.payment_discrepancy_repository import (
    PaymentDiscrepancyRepository,
)
from dsv.domain.repository.product_repository import ProductRepository


class PersistenceError(Exception):
    """The store failed (connection lost, lock timeout, constraint...)."""


class UnitOfWork(ABC):

    orders: OrderRepository
    products: ProductRepository
    carts: CartRepository
    discrepancies: PaymentDiscrepancyRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # No-op after a successful commit.
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change of this unit visible atomically."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every uncommitted change."""


UnitOfWorkFactory = Callable[[], UnitOfWork]
