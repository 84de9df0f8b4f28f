"""
Écriture des lignes d'achat (table purchases).
"""
from typing import Iterable

from sqlalchemy.engine import Connection

from storefront.infra.database import purchases
from .models import LineItem


def insert_purchases(conn: Connection, *, user_id: int, payment_intent_id: str, lines: Iterable[LineItem]) -> int:
    """
    Insère une ligne par article, toutes rattachées au même PaymentIntent.
    À appeler dans une transaction (Store.begin) pour un enregistrement tout-ou-rien.
    """
    created = 0
    for line in lines:
        conn.execute(
            purchases.insert().values(
                user_id=user_id,
                product_id=line.product_id,
                quantity=line.quantity,
                total_price_cents=line.subtotal_cents,
                stripe_payment_intent_id=payment_intent_id,
            )
        )
        created += 1
    return created
