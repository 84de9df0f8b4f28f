"""
Accès aux données du catalogue (table products).
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.engine import Connection

from storefront.infra.database import products


def list_products(conn: Connection) -> List[Dict[str, Any]]:
    rows = conn.execute(
        select(products.c.id, products.c.name, products.c.description, products.c.price_cents)
        .order_by(products.c.id)
    ).mappings().all()
    return [dict(r) for r in rows]


def get_price_cents(conn: Connection, product_id: int) -> Optional[int]:
    """Prix unitaire courant en centimes, None si le produit n'existe pas."""
    return conn.execute(
        select(products.c.price_cents).where(products.c.id == product_id)
    ).scalar_one_or_none()


def insert_product(conn: Connection, *, name: str, description: str, price_cents: int) -> int:
    res = conn.execute(
        products.insert()
        .values(name=name, description=description, price_cents=price_cents)
        .returning(products.c.id)
    )
    return int(res.scalar_one())


def update_product(conn: Connection, product_id: int, *, name: str, description: str, price_cents: int) -> int:
    res = conn.execute(
        update(products)
        .where(products.c.id == product_id)
        .values(name=name, description=description, price_cents=price_cents)
    )
    return res.rowcount


def delete_product(conn: Connection, product_id: int) -> int:
    res = conn.execute(delete(products).where(products.c.id == product_id))
    return res.rowcount
