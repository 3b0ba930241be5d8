"""Abstract repository for persisted per-user carts."""

from __future__ import annotations

from abc import ABC, abstractmethod

from dsv.domain.model.cart import CartItem


class CartRepository(ABC):

    @abstractmethod
    def get_items(self, user_id: int) -> list[CartItem]:
        """Return the user's cart lines, most recently added first."""

    @abstractmethod
    def clear(self, user_id: int) -> None:
        """Remove every line from the user's cart."""
