"""
Dépendances FastAPI vers les ressources construites par le lifespan (app.state).
Les tests remplacent ces ressources via app.state ou app.dependency_overrides.
"""
from fastapi import Request

from storefront.infra.database import Store
from storefront.payments.stripe_client import StripeGateway
from storefront.reconciliation import ReconciliationHook


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_payment_gateway(request: Request) -> StripeGateway:
    return request.app.state.payment_gateway


def get_reconciliation_hook(request: Request) -> ReconciliationHook:
    return request.app.state.reconciliation_hook
