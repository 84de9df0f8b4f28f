"""Couche d’accès aux données (SQLAlchemy Core) pour le domaine Utilisateurs.
Toutes les fonctions reçoivent une connexion ouverte par l'appelant (Store.connect/begin);
les erreurs SQLAlchemy remontent telles quelles, le service décide de leur traduction.
"""
from typing import Any, Dict, Optional

from sqlalchemy import exists, select, update
from sqlalchemy.engine import Connection

from storefront.infra.database import admins, users


def get_user_billing(conn: Connection, user_id: int) -> Optional[Dict[str, Any]]:
    """Retourne {email, stripe_customer_id} de l'utilisateur, ou None s'il n'existe pas."""
    row = conn.execute(
        select(users.c.email, users.c.stripe_customer_id).where(users.c.id == user_id)
    ).mappings().first()
    return dict(row) if row else None


def get_stripe_customer_id(conn: Connection, user_id: int) -> Optional[Dict[str, Any]]:
    """
    Retourne {stripe_customer_id} (éventuellement None) ou None si l'utilisateur n'existe pas.
    Distingue « utilisateur inconnu » de « aucun client Stripe ».
    """
    row = conn.execute(
        select(users.c.stripe_customer_id).where(users.c.id == user_id)
    ).mappings().first()
    return dict(row) if row else None


def set_stripe_customer_id(conn: Connection, user_id: int, customer_id: str) -> int:
    """
    Enregistre l'identifiant client Stripe s'il n'est pas déjà positionné.
    Retour: nombre de lignes mises à jour (0 si déjà positionné ou utilisateur absent).
    """
    res = conn.execute(
        update(users)
        .where(users.c.id == user_id)
        .where(users.c.stripe_customer_id.is_(None))
        .values(stripe_customer_id=customer_id)
    )
    return res.rowcount


def get_user_by_email(conn: Connection, email: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        select(users.c.id, users.c.username, users.c.email, users.c.password).where(users.c.email == email)
    ).mappings().first()
    return dict(row) if row else None


def insert_user(conn: Connection, *, username: str, email: str, password_hash: str) -> int:
    res = conn.execute(
        users.insert()
        .values(username=username, email=email, password=password_hash)
        .returning(users.c.id)
    )
    return int(res.scalar_one())


def is_admin(conn: Connection, user_id: int) -> bool:
    return bool(conn.execute(select(exists().where(admins.c.user_id == user_id))).scalar())


def add_admin(conn: Connection, user_id: int) -> None:
    conn.execute(admins.insert().values(user_id=user_id))
