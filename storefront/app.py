# module storefront.app
from typing import Optional

from fastapi import FastAPI

from storefront.app_setup.exceptions import register_exception_handlers
from storefront.app_setup.lifespan import lifespan
from storefront.app_setup.middlewares import register_basic_middlewares, register_security_middleware
from storefront.app_setup.routers import register_routers
from storefront.infra.database import Store
from storefront.payments.stripe_client import StripeGateway
from storefront.reconciliation import ReconciliationHook


def create_app(
    store: Optional[Store] = None,
    payment_gateway: Optional[StripeGateway] = None,
    reconciliation_hook: Optional[ReconciliationHook] = None,
) -> FastAPI:
    """
    Crée et configure l’instance FastAPI de l’application.
    Étapes:
      1) register_basic_middlewares: CORS, TrustedHost.
      2) register_security_middleware: en-têtes de sécurité.
      3) register_exception_handlers: erreurs métier -> JSON {"detail": ...}.
      4) register_routers: auth, catalogue, cartes, achat, historique, admin, health.
    Les ressources passées ici sont utilisées telles quelles par le lifespan;
    les autres (Store, passerelle Stripe, hook) sont construites au démarrage.
    """
    app = FastAPI(title="Storefront API", lifespan=lifespan)
    app.state.store = store
    app.state.payment_gateway = payment_gateway
    app.state.reconciliation_hook = reconciliation_hook
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
