"""Product aggregate, inventory-relevant slice.

Products are owned by the catalog; checkout only reads their snapshot fields
and mutates ``stock_quantity`` through the inventory ledger.
"""

from __future__ import annotations

from dataclasses import dataclass

from dsv.domain.exceptions import InsufficientStock, ProductUnavailable, ValidationError
from dsv.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog.

    Invariant: ``stock_quantity`` is never negative.
    """

    id: int
    name: str
    price: Money
    stock_quantity: int = 0
    active: bool = True
    description: str | None = None
    image_url: str | None = None
    category_name: str | None = None

    def __post_init__(self) -> None:
        if self.stock_quantity < 0:
            raise ValidationError(
                f"Stock quantity cannot be negative for {self.name}"
            )

    def reserve(self, quantity: int) -> None:
        """Take *quantity* units out of stock for an order."""
        if quantity <= 0:
            raise ValidationError("Reservation quantity must be positive")
        if not self.active:
            raise ProductUnavailable(self.id, self.name)
        if self.stock_quantity < quantity:
            raise InsufficientStock(
                self.id, self.name, available=self.stock_quantity, requested=quantity
            )
        self.stock_quantity -= quantity

    def restore(self, quantity: int) -> None:
        """Put *quantity* units back, e.g. on cancellation. No upper bound."""
        if quantity <= 0:
            raise ValidationError("Restore quantity must be positive")
        self.stock_quantity += quantity

    def set_stock(self, quantity: int) -> None:
        if quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        self.stock_quantity = quantity

    def is_low_stock(self, threshold: int) -> bool:
        return self.stock_quantity <= threshold
