"""Application service: Set Stock use case (administrative)."""

from __future__ import annotations

import structlog

from dsv.application.unit_of_work import UnitOfWorkFactory
from dsv.domain.exceptions import ProductNotFound

logger = structlog.get_logger(__name__)


class SetStockHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, product_id: int, quantity: int) -> None:
        """Overwrite the stock level of a product."""
        with self._uow_factory() as uow:
            product = uow.products.get_for_update(product_id)
            if product is None:
                raise ProductNotFound(product_id)
            previous = product.stock_quantity
            product.set_stock(quantity)
            uow.products.save_stock(product.id, product.stock_quantity)
            uow.commit()

        logger.info(
            "stock_set", product_id=product_id, previous=previous, quantity=quantity
        )
