"""
Registre central des routers (auth, catalogue, cartes, achat, historique, admin, health).
"""
from fastapi import FastAPI
from storefront.auth.views import router as auth_router
from storefront.products.views import router as products_router, admin_router as admin_products_router
from storefront.cards.views import router as cards_router
from storefront.checkout.views import router as checkout_router
from storefront.history.views import router as history_router
from storefront.admin.views import router as admin_router
from storefront.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l’application.
    - L’ordre n’a pas d’impact sauf conflits de chemins (évités par préfixes).
    """
    app.include_router(auth_router)
    app.include_router(products_router)
    app.include_router(cards_router)
    app.include_router(checkout_router)
    app.include_router(history_router)
    # Admin
    app.include_router(admin_products_router)
    app.include_router(admin_router)
    # Health & monitoring
    app.include_router(health_router)
