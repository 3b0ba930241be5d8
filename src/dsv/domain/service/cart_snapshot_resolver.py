"""Domain service: Cart Snapshot Resolver.

Turns whatever the customer is buying into an ordered tuple of
PurchaseLines.  A non-empty client cart always wins over the persisted one,
for guests and signed-in users alike, so a browser-side cart keeps working
regardless of server session state.
"""

from __future__ import annotations

from collections.abc import Sequence

from dsv.domain.exceptions import EmptyCart, ProductNotFound
from dsv.domain.model.cart import (
    CartSnapshot,
    CartSource,
    ClientCartItem,
    PurchaseLine,
)
from dsv.domain.model.product import Product
from dsv.domain.model.value_objects import Quantity
from dsv.domain.repository.cart_repository import CartRepository
from dsv.domain.repository.product_repository import ProductRepository


class CartSnapshotResolver:

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._cart_repo = cart_repo
        self._product_repo = product_repo

    def resolve(
        self,
        user_id: int | None,
        client_items: Sequence[ClientCartItem] | None = None,
    ) -> CartSnapshot:
        if client_items:
            return CartSnapshot(
                source=CartSource.CLIENT,
                lines=tuple(self._from_client(item) for item in client_items),
            )

        if user_id is None:
            raise EmptyCart()

        cart_items = self._cart_repo.get_items(user_id)
        if not cart_items:
            raise EmptyCart()

        lines = []
        for item in cart_items:
            product = self._product(item.product_id)
            lines.append(
                PurchaseLine(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=Quantity(item.quantity),
                    unit_price=item.unit_price,  # price seen when added to cart
                    product_image_url=product.image_url,
                    product_description=product.description,
                    category_name=product.category_name,
                )
            )
        return CartSnapshot(source=CartSource.PERSISTED, lines=tuple(lines))

    # --- Internal helpers -----------------------------------------------------

    def _from_client(self, item: ClientCartItem) -> PurchaseLine:
        product = self._product(item.product_id)
        return PurchaseLine(
            product_id=product.id,
            product_name=item.product_name or product.name,
            quantity=Quantity(item.quantity),
            unit_price=item.unit_price,
            product_image_url=item.product_image_url or product.image_url,
            product_description=product.description,
            category_name=product.category_name,
        )

    def _product(self, product_id: int) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product
