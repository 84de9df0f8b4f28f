"""Couche service du catalogue: validation puis délégation au repository."""
import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError

from storefront.errors import InvalidInput, Internal, NotFound
from storefront.infra.database import Store
from . import repository

logger = logging.getLogger(__name__)


def _validate(name: str, price_cents: int) -> str:
    name = (name or "").strip()
    if not name or price_cents is None or price_cents <= 0:
        raise InvalidInput("name and price_cents are required (price_cents > 0)")
    return name


def list_products(store: Store) -> List[Dict[str, Any]]:
    try:
        with store.connect() as conn:
            return repository.list_products(conn)
    except SQLAlchemyError:
        logger.exception("products.list_products failed")
        raise Internal("Failed to query products")


def create_product(store: Store, *, name: str, description: str, price_cents: int) -> Dict[str, Any]:
    name = _validate(name, price_cents)
    description = description or ""
    try:
        with store.begin() as conn:
            product_id = repository.insert_product(conn, name=name, description=description, price_cents=price_cents)
    except SQLAlchemyError:
        logger.exception("products.create_product failed name=%s price_cents=%s", name, price_cents)
        raise Internal("Failed to create product")
    logger.info("products.create_product id=%s", product_id)
    return {"id": product_id, "name": name, "description": description, "price_cents": price_cents}


def update_product(store: Store, product_id: int, *, name: str, description: str, price_cents: int) -> Dict[str, Any]:
    name = _validate(name, price_cents)
    description = description or ""
    try:
        with store.begin() as conn:
            updated = repository.update_product(
                conn, product_id, name=name, description=description, price_cents=price_cents
            )
    except SQLAlchemyError:
        logger.exception("products.update_product failed id=%s", product_id)
        raise Internal("Failed to update product")
    if not updated:
        raise NotFound("Product not found")
    return {"id": product_id, "name": name, "description": description, "price_cents": price_cents}


def delete_product(store: Store, product_id: int) -> None:
    try:
        with store.begin() as conn:
            deleted = repository.delete_product(conn, product_id)
    except SQLAlchemyError:
        # Produit référencé par des achats: la contrainte FK bloque la suppression
        logger.exception("products.delete_product failed id=%s", product_id)
        raise Internal("Failed to delete product")
    if not deleted:
        raise NotFound("Product not found")
