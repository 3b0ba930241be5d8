"""Domain service: Inventory Ledger.

The ledger is the only writer of stock counts while orders are placed or
cancelled.  Every read goes through ``get_for_update`` so the product row
stays locked until the surrounding unit of work commits or rolls back; two
concurrent checkouts therefore cannot both pass the stock check.

Threshold alerts are only *collected* here.  The application layer hands
them to the notifier after commit so a slow notifier never holds a lock.
"""

from __future__ import annotations

from copy import copy
from dataclasses import dataclass
from enum import Enum

from dsv.domain.exceptions import ProductNotFound
from dsv.domain.model.product import Product
from dsv.domain.repository.product_repository import ProductRepository

DEFAULT_LOW_STOCK_THRESHOLD = 10


class StockAlertKind(Enum):
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"


@dataclass(frozen=True)
class StockAlert:
    kind: StockAlertKind
    product: Product


class InventoryLedger:

    def __init__(
        self,
        product_repo: ProductRepository,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        self._product_repo = product_repo
        self._low_stock_threshold = low_stock_threshold
        self._alerts: list[StockAlert] = []

    def reserve(self, product_id: int, quantity: int) -> Product:
        """Check and decrement stock for one line.

        Raises ProductNotFound, ProductUnavailable or InsufficientStock
        before anything is written.
        """
        product = self._load_locked(product_id)
        before = product.stock_quantity
        product.reserve(quantity)
        self._product_repo.save_stock(product.id, product.stock_quantity)
        self._check_thresholds(product, before)
        return product

    def reserve_all(self, quantities: dict[int, int]) -> list[Product]:
        """Reserve several products, locking rows in ascending ID order.

        A fixed lock order keeps two orders over the same products from
        deadlocking each other.
        """
        return [self.reserve(pid, quantities[pid]) for pid in sorted(quantities)]

    def restore(self, product_id: int, quantity: int) -> Product:
        product = self._load_locked(product_id)
        product.restore(quantity)
        self._product_repo.save_stock(product.id, product.stock_quantity)
        return product

    def restore_all(self, quantities: dict[int, int]) -> list[Product]:
        return [self.restore(pid, quantities[pid]) for pid in sorted(quantities)]

    def drain_alerts(self) -> list[StockAlert]:
        """Hand over collected alerts and forget them."""
        alerts, self._alerts = self._alerts, []
        return alerts

    # --- Internal helpers -----------------------------------------------------

    def _load_locked(self, product_id: int) -> Product:
        product = self._product_repo.get_for_update(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def _check_thresholds(self, product: Product, before: int) -> None:
        after = product.stock_quantity
        if after == 0:
            self._alerts.append(StockAlert(StockAlertKind.OUT_OF_STOCK, copy(product)))
        elif before > self._low_stock_threshold >= after:
            self._alerts.append(StockAlert(StockAlertKind.LOW_STOCK, copy(product)))
