"""Lecture de l'historique d'achats (purchases jointes à products)."""
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.engine import Connection

from storefront.infra.database import products, purchases


def list_user_purchases(conn: Connection, user_id: int) -> List[Dict[str, Any]]:
    """Achats de l'utilisateur, du plus récent au plus ancien."""
    rows = conn.execute(
        select(
            purchases.c.id.label("purchase_id"),
            purchases.c.product_id,
            products.c.name.label("product_name"),
            purchases.c.quantity,
            purchases.c.total_price_cents,
            purchases.c.stripe_payment_intent_id,
            purchases.c.purchased_at,
        )
        .select_from(purchases.join(products, purchases.c.product_id == products.c.id))
        .where(purchases.c.user_id == user_id)
        .order_by(purchases.c.purchased_at.desc(), purchases.c.id.desc())
    ).mappings().all()
    return [dict(r) for r in rows]
