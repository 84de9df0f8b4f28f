from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True)
class StoredCard:
    id: int
    user_id: int
    stripe_payment_method_id: str
    brand: str
    last4: str
    exp_month: int
    exp_year: int


class AddCardRequest(BaseModel):
    payment_method_id: str = ""


class CreditCardResponse(BaseModel):
    id: int
    stripe_pm_id: str
    brand: str
    last4: str
    exp_month: int
    exp_year: int

    @classmethod
    def from_card(cls, card: StoredCard) -> "CreditCardResponse":
        return cls(
            id=card.id,
            stripe_pm_id=card.stripe_payment_method_id,
            brand=card.brand,
            last4=card.last4,
            exp_month=card.exp_month,
            exp_year=card.exp_year,
        )
