"""
Accès aux données pour la feature 'cards' (table credit_cards).
"""
from typing import Any, Dict, Optional

from sqlalchemy import delete, select
from sqlalchemy.engine import Connection

from storefront.infra.database import credit_cards

# module storefront.cards.repository
def insert_card(
    conn: Connection,
    *,
    user_id: int,
    stripe_payment_method_id: str,
    brand: str,
    last4: str,
    exp_month: int,
    exp_year: int,
) -> int:
    """Insère la carte et retourne son id."""
    res = conn.execute(
        credit_cards.insert()
        .values(
            user_id=user_id,
            stripe_payment_method_id=stripe_payment_method_id,
            brand=brand,
            last4=last4,
            exp_month=exp_month,
            exp_year=exp_year,
        )
        .returning(credit_cards.c.id)
    )
    return int(res.scalar_one())


def get_card_for_user(conn: Connection, card_id: int, user_id: int) -> Optional[Dict[str, Any]]:
    """Carte appartenant à l'utilisateur, None si absente ou détenue par un autre utilisateur."""
    row = conn.execute(
        select(credit_cards)
        .where(credit_cards.c.id == card_id)
        .where(credit_cards.c.user_id == user_id)
    ).mappings().first()
    return dict(row) if row else None


def delete_card(conn: Connection, card_id: int, user_id: int) -> int:
    """Supprime la carte; retourne le nombre de lignes supprimées."""
    res = conn.execute(
        delete(credit_cards)
        .where(credit_cards.c.id == card_id)
        .where(credit_cards.c.user_id == user_id)
    )
    return res.rowcount
