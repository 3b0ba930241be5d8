"""SQLAlchemy implementation of CartRepository."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from dsv.domain.model.cart import CartItem
from dsv.domain.model.value_objects import Money
from dsv.domain.repository.cart_repository import CartRepository
from dsv.infrastructure.persistence.tables import CartItemRow


class SqlCartRepository(CartRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_items(self, user_id: int) -> list[CartItem]:
        stmt = (
            select(CartItemRow)
            .where(CartItemRow.user_id == user_id)
            .order_by(CartItemRow.added_at.desc(), CartItemRow.id.desc())
        )
        return [
            CartItem(
                user_id=row.user_id,
                product_id=row.product_id,
                quantity=row.quantity,
                unit_price=Money(row.unit_price),
            )
            for row in self._session.execute(stmt).scalars()
        ]

    def clear(self, user_id: int) -> None:
        self._session.execute(delete(CartItemRow).where(CartItemRow.user_id == user_id))
