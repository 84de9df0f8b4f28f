# module storefront.history.views
import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from storefront.auth.models import AuthContext
from storefront.errors import Internal
from storefront.infra.database import Store
from storefront.infra.deps import get_store
from storefront.utils.security import require_user
from . import repository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["History"])


class PurchaseHistoryItem(BaseModel):
    purchase_id: int
    product_id: int
    product_name: str
    quantity: int
    total_price_cents: int
    stripe_payment_intent_id: str
    purchased_at: datetime


@router.get("/history", response_model=List[PurchaseHistoryItem])
def get_user_history(user: AuthContext = Depends(require_user), store: Store = Depends(get_store)):
    """Historique d'achats de l'utilisateur authentifié (lecture seule)."""
    try:
        with store.connect() as conn:
            return repository.list_user_purchases(conn, user.user_id)
    except SQLAlchemyError:
        logger.exception("history.get_user_history failed user_id=%s", user.user_id)
        raise Internal("Failed to query purchase history")
