"""Load a JSON catalog (products and, optionally, saved carts) into the store.

Expected shape::

    {
      "products": [
        {"id": 1, "name": "Banh Pia", "price": "120000", "stock_quantity": 50,
         "category_name": "Banh", "description": "...", "image_url": "..."}
      ],
      "carts": [
        {"user_id": 7, "product_id": 1, "quantity": 2, "unit_price": "120000"}
      ]
    }

A bare list is read as the ``products`` array.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from dsv.application.unit_of_work import PersistenceError
from dsv.domain.exceptions import ValidationError
from dsv.domain.model.product import Product
from dsv.domain.model.value_objects import Money
from dsv.infrastructure.persistence.sql_product_repository import SqlProductRepository
from dsv.infrastructure.persistence.tables import CartItemRow

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LoadSummary:
    products: int
    cart_items: int


def load_catalog(path: Path, sessions: sessionmaker[Session]) -> LoadSummary:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Catalog file is not valid JSON: {exc}") from exc

    if isinstance(raw, list):
        raw = {"products": raw}

    products = [_product(item) for item in raw.get("products", [])]
    carts = raw.get("carts", [])

    now = datetime.now(timezone.utc)
    cart_rows = [_cart_row(item, now) for item in carts]

    try:
        with sessions.begin() as session:
            repo = SqlProductRepository(session)
            for product in products:
                repo.add(product)
            session.add_all(cart_rows)
    except SQLAlchemyError as exc:
        raise PersistenceError(str(exc)) from exc

    logger.info("catalog_loaded", path=str(path), products=len(products), cart_items=len(carts))
    return LoadSummary(products=len(products), cart_items=len(carts))


def _product(item: dict) -> Product:
    try:
        return Product(
            id=int(item["id"]),
            name=item["name"],
            price=Money.of(item["price"]),
            stock_quantity=int(item.get("stock_quantity", 0)),
            active=bool(item.get("active", True)),
            description=item.get("description"),
            image_url=item.get("image_url"),
            category_name=item.get("category_name"),
        )
    except KeyError as exc:
        raise ValidationError(f"Catalog product is missing field {exc}") from exc


def _cart_row(item: dict, added_at: datetime) -> CartItemRow:
    try:
        return CartItemRow(
            user_id=int(item["user_id"]),
            product_id=int(item["product_id"]),
            quantity=int(item["quantity"]),
            unit_price=Money.of(item["unit_price"]).amount,
            added_at=added_at,
        )
    except KeyError as exc:
        raise ValidationError(f"Catalog cart line is missing field {exc}") from exc
