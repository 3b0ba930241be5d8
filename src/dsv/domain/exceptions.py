"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Checkout failures carry enough detail (product, available vs requested) for
the storefront to prompt a correction.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ProductNotFound(EntityNotFoundError):

    def __init__(self, product_id: int) -> None:
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class OrderNotFound(EntityNotFoundError):

    def __init__(self, order_ref: int | str) -> None:
        self.order_ref = order_ref
        super().__init__(f"Order not found: {order_ref}")


class EmptyCart(DomainException):
    """Checkout was attempted with nothing to buy."""

    def __init__(self, message: str = "Cart is empty") -> None:
        super().__init__(message)


class CartInvalid(DomainException):
    """A cart line cannot be fulfilled; names the offending product."""

    def __init__(self, product_id: int, message: str) -> None:
        self.product_id = product_id
        super().__init__(message)


class ProductUnavailable(CartInvalid):

    def __init__(self, product_id: int, product_name: str) -> None:
        self.product_name = product_name
        super().__init__(
            product_id, f"Product is no longer available: {product_name}"
        )


class InsufficientStock(CartInvalid):

    def __init__(
        self, product_id: int, product_name: str, available: int, requested: int
    ) -> None:
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            product_id,
            f"Insufficient stock for product: {product_name}. "
            f"Available: {available}, Requested: {requested}",
        )


class InvalidTransition(DomainException):

    def __init__(self, current, target) -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"Invalid status transition from {current.value} to {target.value}"
        )


class NotOwner(DomainException):
    """The requesting user does not own the order."""


class ReconciliationError(Exception):
    """Infrastructure fault while matching a payment; safe to retry.

    Not a DomainException: business rejections during
    reconciliation are reported as ``False``, never raised.
    """
