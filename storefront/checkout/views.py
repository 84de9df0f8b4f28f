# module storefront.checkout.views

"""Endpoint d'achat multi-articles.
- POST /users/buy: calcule le total depuis le catalogue, débite la carte via un
  PaymentIntent Stripe confirmé, puis enregistre les lignes d'achat.
- Entrée JSON: {"items": [{"product_id": <int>, "quantity": <int>}], "payment_method_id": "pm_..."}
- Sortie: {"success": true, "stripe_payment_intent_id": "pi_..."}
"""
from fastapi import APIRouter, Depends

from storefront.auth.models import AuthContext
from storefront.config import STRIPE_CURRENCY
from storefront.infra.deps import get_payment_gateway, get_reconciliation_hook, get_store
from storefront.utils.rate_limit import optional_rate_limit
from storefront.utils.security import require_user
from .models import BuyRequest, BuyResponse
from .service import CheckoutService

router = APIRouter(prefix="/users", tags=["Checkout"])


def get_checkout_service(
    store=Depends(get_store),
    gateway=Depends(get_payment_gateway),
    reconciliation=Depends(get_reconciliation_hook),
) -> CheckoutService:
    return CheckoutService(store, gateway, STRIPE_CURRENCY, reconciliation)


@router.post(
    "/buy",
    response_model=BuyResponse,
    dependencies=[Depends(optional_rate_limit(times=10, seconds=60))],
)
def buy_products(
    req: BuyRequest,
    user: AuthContext = Depends(require_user),
    service: CheckoutService = Depends(get_checkout_service),
) -> BuyResponse:
    items = [(it.product_id, it.quantity) for it in req.items]
    confirmation = service.checkout(user, items, req.payment_method_id)
    return BuyResponse(
        success=confirmation.success,
        stripe_payment_intent_id=confirmation.stripe_payment_intent_id,
    )
