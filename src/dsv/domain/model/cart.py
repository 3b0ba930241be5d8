"""Cart inputs and the normalized purchase lines checkout works from.

Carts are not owned by checkout: ``CartItem`` comes from the persisted
per-user cart, ``ClientCartItem`` from a client-side (browser) cart.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from dsv.domain.model.value_objects import Money, Quantity


@dataclass(frozen=True)
class CartItem:
    """A line of a persisted cart, with the price seen when it was added."""

    user_id: int
    product_id: int
    quantity: int
    unit_price: Money


@dataclass(frozen=True)
class ClientCartItem:
    """A line submitted by the client together with the checkout request."""

    product_id: int
    quantity: int
    unit_price: Money
    product_name: str | None = None
    product_image_url: str | None = None


class CartSource(Enum):
    CLIENT = "CLIENT"
    PERSISTED = "PERSISTED"


@dataclass(frozen=True)
class PurchaseLine:
    product_id: int
    product_name: str
    quantity: Quantity
    unit_price: Money
    product_image_url: str | None = None
    product_description: str | None = None
    category_name: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class CartSnapshot:
    source: CartSource
    lines: tuple[PurchaseLine, ...]

    @property
    def subtotal(self) -> Money:
        result = Money.zero()
        for line in self.lines:
            result = result + line.line_total
        return result
