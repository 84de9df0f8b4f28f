import os

# Pas de Redis pendant les tests: le lifespan désactive fastapi-limiter
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Any, Dict, Generator, List, Optional, Tuple
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from storefront.app import create_app
from storefront.auth.models import AuthContext
from storefront.auth.service import create_jwt, hash_password
from storefront.infra.database import Store, products, purchases, users
from storefront.users import repository as users_repo


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakeGateway:
    """
    Passerelle Stripe en mémoire.
    - calls: [(méthode, kwargs), ...] dans l'ordre d'appel
    - fail: {méthode: exception} pour simuler un refus ou une panne
    - intent_status: statut renvoyé par create_and_confirm_payment_intent
    """

    def __init__(self):
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.fail: Dict[str, Exception] = {}
        self.intent_status = "succeeded"
        self._customers = 0
        self._intents = 0

    def _call(self, name: str, **kwargs) -> None:
        self.calls.append((name, kwargs))
        exc = self.fail.get(name)
        if exc is not None:
            raise exc

    def count(self, name: str) -> int:
        return sum(1 for n, _ in self.calls if n == name)

    def create_customer(self, email: str) -> str:
        self._call("create_customer", email=email)
        self._customers += 1
        return f"cus_test_{self._customers}"

    def attach_payment_method(self, payment_method_id: str, customer_id: str) -> Dict[str, Any]:
        self._call("attach_payment_method", payment_method_id=payment_method_id, customer_id=customer_id)
        return {"id": payment_method_id, "brand": "visa", "last4": "4242", "exp_month": 12, "exp_year": 2030}

    def detach_payment_method(self, payment_method_id: str) -> None:
        self._call("detach_payment_method", payment_method_id=payment_method_id)

    def create_and_confirm_payment_intent(self, *, amount, currency, customer_id, payment_method_id) -> Dict[str, Any]:
        self._call(
            "create_and_confirm_payment_intent",
            amount=amount,
            currency=currency,
            customer_id=customer_id,
            payment_method_id=payment_method_id,
        )
        self._intents += 1
        return {"id": f"pi_test_{self._intents}", "status": self.intent_status, "amount": amount, "currency": currency}


class RecordingHook:
    def __init__(self):
        self.events = []

    def report(self, event) -> None:
        self.events.append(event)


@pytest.fixture()
def store() -> Generator[Store, None, None]:
    s = Store("sqlite://")
    s.create_schema()
    yield s
    s.dispose()


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def reconciliation() -> RecordingHook:
    return RecordingHook()


@pytest.fixture()
def app(store, gateway, reconciliation):
    return create_app(store=store, payment_gateway=gateway, reconciliation_hook=reconciliation)


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="session")
def password_hash() -> str:
    # bcrypt est lent: un seul hash pour toute la session
    return hash_password("secret123")


@pytest.fixture()
def make_user(store, password_hash):
    """Crée un utilisateur (optionnellement admin / avec Customer Stripe) et retourne son AuthContext."""
    def _make(
        username: str = "alice",
        email: Optional[str] = None,
        customer_id: Optional[str] = None,
        admin: bool = False,
    ) -> AuthContext:
        with store.begin() as conn:
            user_id = users_repo.insert_user(
                conn, username=username, email=email or f"{username}@example.com", password_hash=password_hash
            )
            if customer_id:
                users_repo.set_stripe_customer_id(conn, user_id, customer_id)
            if admin:
                users_repo.add_admin(conn, user_id)
        return AuthContext(user_id=user_id, username=username)
    return _make


@pytest.fixture()
def make_product(store):
    def _make(name: str = "Widget", price_cents: int = 500, description: str = "") -> int:
        with store.begin() as conn:
            res = conn.execute(
                products.insert()
                .values(name=name, description=description, price_cents=price_cents)
                .returning(products.c.id)
            )
            return int(res.scalar_one())
    return _make


@pytest.fixture()
def auth_headers():
    def _headers(ctx: AuthContext) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_jwt(ctx.user_id, ctx.username)}"}
    return _headers


@pytest.fixture()
def count_purchases(store):
    def _count(user_id: Optional[int] = None) -> int:
        stmt = select(func.count()).select_from(purchases)
        if user_id is not None:
            stmt = stmt.where(purchases.c.user_id == user_id)
        with store.connect() as conn:
            return int(conn.execute(stmt).scalar_one())
    return _count


@pytest.fixture()
def customer_of(store):
    def _customer(user_id: int) -> Optional[str]:
        with store.connect() as conn:
            return conn.execute(
                select(users.c.stripe_customer_id).where(users.c.id == user_id)
            ).scalar_one_or_none()
    return _customer
