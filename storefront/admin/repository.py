from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from storefront.infra.database import products, purchases, users


def fetch_sales(
    conn: Connection,
    *,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    username: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Ventes (purchases jointes à users et products), plus récentes d'abord.
    - start: inclus; end: exclu
    - username: égalité exacte
    """
    stmt = (
        select(
            purchases.c.id.label("purchase_id"),
            purchases.c.product_id,
            products.c.name.label("product_name"),
            users.c.id.label("user_id"),
            users.c.username,
            purchases.c.quantity,
            purchases.c.total_price_cents,
            purchases.c.purchased_at,
        )
        .select_from(
            purchases
            .join(products, purchases.c.product_id == products.c.id)
            .join(users, purchases.c.user_id == users.c.id)
        )
    )
    if start is not None:
        stmt = stmt.where(purchases.c.purchased_at >= start)
    if end is not None:
        stmt = stmt.where(purchases.c.purchased_at < end)
    if username:
        stmt = stmt.where(users.c.username == username)
    stmt = stmt.order_by(purchases.c.purchased_at.desc(), purchases.c.id.desc())
    return [dict(r) for r in conn.execute(stmt).mappings().all()]
