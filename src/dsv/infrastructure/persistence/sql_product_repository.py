"""SQLAlchemy implementation of ProductRepository."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from dsv.domain.model.product import Product
from dsv.domain.model.value_objects import Money
from dsv.domain.repository.product_repository import ProductRepository
from dsv.infrastructure.persistence.tables import ProductRow


class SqlProductRepository(ProductRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: int) -> Product | None:
        row = self._session.get(ProductRow, product_id)
        return self._to_domain(row) if row is not None else None

    def get_for_update(self, product_id: int) -> Product | None:
        stmt = (
            select(ProductRow)
            .where(ProductRow.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = self._session.execute(stmt).scalar_one_or_none()
        return self._to_domain(row) if row is not None else None

    def save_stock(self, product_id: int, quantity: int) -> None:
        self._session.execute(
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .values(stock_quantity=quantity)
        )

    def list_all(self) -> list[Product]:
        rows = self._session.execute(select(ProductRow).order_by(ProductRow.id)).scalars()
        return [self._to_domain(row) for row in rows]

    def add(self, product: Product) -> None:
        self._session.merge(
            ProductRow(
                id=product.id,
                name=product.name,
                price=product.price.amount,
                stock_quantity=product.stock_quantity,
                active=product.active,
                description=product.description,
                image_url=product.image_url,
                category_name=product.category_name,
            )
        )
        self._session.flush()

    # --- Mapping helpers ------------------------------------------------------

    @staticmethod
    def _to_domain(row: ProductRow) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            price=Money(row.price),
            stock_quantity=row.stock_quantity,
            active=row.active,
            description=row.description,
            image_url=row.image_url,
            category_name=row.category_name,
        )
