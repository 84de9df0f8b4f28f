from dataclasses import dataclass
from typing import List

from pydantic import BaseModel, Field

from storefront.infra.database import MAX_ID

MAX_QUANTITY = 1_000_000


@dataclass(frozen=True)
class LineItem:
    product_id: int
    quantity: int
    subtotal_cents: int


@dataclass(frozen=True)
class PaymentConfirmation:
    success: bool
    stripe_payment_intent_id: str


class BuyItem(BaseModel):
    product_id: int = Field(..., ge=1, le=MAX_ID)
    # quantity <= 0 est rejetée par le service avec un message dédié
    quantity: int = Field(..., le=MAX_QUANTITY)


class BuyRequest(BaseModel):
    items: List[BuyItem] = Field(default_factory=list)
    payment_method_id: str = ""


class BuyResponse(BaseModel):
    success: bool
    stripe_payment_intent_id: str
