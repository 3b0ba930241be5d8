"""Application service: Show Inventory use case (query)."""

from __future__ import annotations

from dsv.application.dto import InventoryLineDTO
from dsv.application.unit_of_work import UnitOfWorkFactory
from dsv.domain.service.inventory_ledger import DEFAULT_LOW_STOCK_THRESHOLD


class ShowInventoryHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        self._uow_factory = uow_factory
        self._low_stock_threshold = low_stock_threshold

    def handle(self) -> list[InventoryLineDTO]:
        with self._uow_factory() as uow:
            products = uow.products.list_all()
        return [
            InventoryLineDTO(
                product_id=product.id,
                product_name=product.name,
                active=product.active,
                stock_quantity=product.stock_quantity,
                low_stock=product.is_low_stock(self._low_stock_threshold),
            )
            for product in sorted(products, key=lambda p: p.id)
        ]
