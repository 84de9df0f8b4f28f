"""
Accès à la base relationnelle (SQLAlchemy Core).

- Déclare le schéma (users, admins, products, credit_cards, purchases)
- Store: objet construit au démarrage (lifespan) puis injecté dans les services;
  aucune connexion globale implicite.
  - connect(): connexion courte pour lectures/écritures unitaires (commit explicite)
  - begin(): transaction BEGIN/COMMIT, ROLLBACK automatique si exception
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    event,
    func,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

metadata = MetaData()

# Bornes des entiers liés aux requêtes: 64 bits signés côté driver, INTEGER pour les prix
MAX_ID = 2**63 - 1
MAX_INT = 2**31 - 1

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("username", String(150), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", String(255), nullable=False),
    Column("stripe_customer_id", String(255), nullable=True),
)

admins = Table(
    "admins",
    metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("price_cents", Integer, nullable=False),
    CheckConstraint("price_cents > 0", name="ck_products_price_positive"),
)

credit_cards = Table(
    "credit_cards",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("stripe_payment_method_id", String(255), nullable=False, unique=True),
    Column("brand", String(50), nullable=False, default=""),
    Column("last4", String(4), nullable=False, default=""),
    Column("exp_month", Integer, nullable=False, default=0),
    Column("exp_year", Integer, nullable=False, default=0),
)

purchases = Table(
    "purchases",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("product_id", Integer, ForeignKey("products.id"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("total_price_cents", BigInteger, nullable=False),
    Column("stripe_payment_intent_id", String(255), nullable=False, index=True),
    Column("purchased_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint("quantity > 0", name="ck_purchases_quantity_positive"),
)


class Store:
    """Passerelle vers la base: possède l'engine et ouvre connexions/transactions."""

    def __init__(self, url: str, engine: Optional[Engine] = None, **engine_kwargs):
        self.url = url
        self.engine = engine or self._make_engine(url, **engine_kwargs)

    @staticmethod
    def _make_engine(url: str, **engine_kwargs) -> Engine:
        if url.startswith("sqlite"):
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
            # Base mémoire: une seule connexion partagée, sinon chaque connexion voit une base vide
            if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
                engine_kwargs.setdefault("poolclass", StaticPool)
            engine = create_engine(url, **engine_kwargs)

            @event.listens_for(engine, "connect")
            def _enable_foreign_keys(dbapi_connection, _record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

            return engine

        engine_kwargs.setdefault("pool_pre_ping", True)
        engine_kwargs.setdefault("pool_recycle", 3600)
        return create_engine(url, **engine_kwargs)

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Connexion courte; l'appelant fait conn.commit() après une écriture."""
        with self.engine.connect() as conn:
            yield conn

    @contextmanager
    def begin(self) -> Iterator[Connection]:
        """Transaction: COMMIT en sortie normale, ROLLBACK si une exception remonte."""
        with self.engine.begin() as conn:
            yield conn

    def create_schema(self) -> None:
        metadata.create_all(self.engine)
        logger.info("database schema ready url=%s", self.engine.url.render_as_string(hide_password=True))

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.exec_driver_sql("SELECT 1")
            return True
        except Exception:
            logger.exception("database ping failed")
            return False

    def dispose(self) -> None:
        self.engine.dispose()
