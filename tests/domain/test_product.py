"""Unit tests for the Product stock rules."""

import pytest

from dsv.domain.exceptions import (
    CartInvalid,
    InsufficientStock,
    ProductUnavailable,
    ValidationError,
)
from dsv.domain.model.product import Product
from dsv.domain.model.value_objects import Money


def _product(stock: int = 5, active: bool = True) -> Product:
    return Product(id=1, name="Banh Pia", price=Money.of("120000"), stock_quantity=stock, active=active)


def test_negative_stock_rejected():
    with pytest.raises(ValidationError):
        _product(stock=-1)


def test_reserve_decrements():
    product = _product(stock=5)
    product.reserve(3)
    assert product.stock_quantity == 2


def test_reserve_everything_leaves_zero():
    product = _product(stock=2)
    product.reserve(2)
    assert product.stock_quantity == 0


def test_insufficient_stock_names_product_and_amounts():
    product = _product(stock=2)
    with pytest.raises(InsufficientStock) as exc_info:
        product.reserve(3)
    err = exc_info.value
    assert isinstance(err, CartInvalid)
    assert (err.product_id, err.available, err.requested) == (1, 2, 3)
    assert str(err) == "Insufficient stock for product: Banh Pia. Available: 2, Requested: 3"
    assert product.stock_quantity == 2


def test_inactive_product_unavailable():
    product = _product(active=False)
    with pytest.raises(ProductUnavailable):
        product.reserve(1)
    assert product.stock_quantity == 5


def test_restore_has_no_upper_bound():
    product = _product(stock=5)
    product.restore(1000)
    assert product.stock_quantity == 1005


@pytest.mark.parametrize("qty", [0, -2])
def test_non_positive_quantities_rejected(qty):
    product = _product()
    with pytest.raises(ValidationError):
        product.reserve(qty)
    with pytest.raises(ValidationError):
        product.restore(qty)


def test_set_stock():
    product = _product()
    product.set_stock(0)
    assert product.stock_quantity == 0
    with pytest.raises(ValidationError):
        product.set_stock(-1)


def test_low_stock_is_inclusive():
    assert _product(stock=10).is_low_stock(10)
    assert not _product(stock=11).is_low_stock(10)
