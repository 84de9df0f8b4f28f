# module storefront.cards.views

"""Endpoints des cartes enregistrées (carte sur fichier via Stripe).
- POST /users/creditcards: attache un PaymentMethod Stripe et le mémorise (201).
- DELETE /users/creditcards/{card_id}: détache chez Stripe puis supprime (204).
Sécurité:
- require_user: AuthContext typé transmis explicitement au service.
- optional_rate_limit: limite la fréquence d'ajout de cartes.
"""
from fastapi import APIRouter, Depends, Path, Response
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from storefront.auth.models import AuthContext
from storefront.infra.database import MAX_ID
from storefront.infra.deps import get_payment_gateway, get_reconciliation_hook, get_store
from storefront.utils.rate_limit import optional_rate_limit
from storefront.utils.security import require_user
from .models import AddCardRequest, CreditCardResponse
from .service import CardRegistry

router = APIRouter(prefix="/users/creditcards", tags=["Credit cards"])


def get_card_registry(
    store=Depends(get_store),
    gateway=Depends(get_payment_gateway),
    reconciliation=Depends(get_reconciliation_hook),
) -> CardRegistry:
    return CardRegistry(store, gateway, reconciliation)


@router.post(
    "",
    status_code=HTTP_201_CREATED,
    response_model=CreditCardResponse,
    dependencies=[Depends(optional_rate_limit(times=10, seconds=60))],
)
def add_credit_card(
    req: AddCardRequest,
    user: AuthContext = Depends(require_user),
    registry: CardRegistry = Depends(get_card_registry),
) -> CreditCardResponse:
    """Attache le PaymentMethod au Customer Stripe de l'utilisateur (créé si besoin)."""
    card = registry.attach_card(user, req.payment_method_id)
    return CreditCardResponse.from_card(card)


@router.delete("/{card_id}", status_code=HTTP_204_NO_CONTENT)
def delete_credit_card(
    card_id: int = Path(..., ge=1, le=MAX_ID),
    user: AuthContext = Depends(require_user),
    registry: CardRegistry = Depends(get_card_registry),
) -> Response:
    registry.detach_card(user, card_id)
    return Response(status_code=HTTP_204_NO_CONTENT)
