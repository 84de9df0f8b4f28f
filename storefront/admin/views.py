# module storefront.admin.views
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from storefront.infra.database import Store
from storefront.infra.deps import get_store
from storefront.utils.security import require_admin
from . import service as admin_service

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


class SaleRecord(BaseModel):
    purchase_id: int
    product_id: int
    product_name: str
    user_id: int
    username: str
    quantity: int
    total_price_cents: int
    purchased_at: datetime


@router.get("/sales", response_model=List[SaleRecord])
def get_sales(
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    username: Optional[str] = None,
    store: Store = Depends(get_store),
):
    """Ventes filtrées par période (from/to, YYYY-MM-DD) et/ou username exact."""
    return admin_service.get_sales(store, date_from=date_from, date_to=date_to, username=username)
