"""
Cas d'usage 'checkout': achat multi-articles payé par carte.

Ordre strict:
  1) Validation de la requête (aucun appel externe si invalide)
  2) Customer Stripe de l'utilisateur (carte requise au préalable)
  3) Prix lus dans le catalogue au moment de l'achat, jamais fournis par le client
  4) Un seul PaymentIntent confirmé pour le total
  5) Enregistrement des lignes dans une transaction unique
Un paiement encaissé dont l'enregistrement local échoue n'est pas remboursé:
l'écart est transmis au hook de réconciliation et l'appel échoue en Internal.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError

from storefront.auth.models import AuthContext
from storefront.errors import InvalidInput, Internal, NotFound, ReconciliationError
from storefront.infra.database import Store
from storefront.payments.stripe_client import StripeGateway
from storefront.products import repository as products_repo
from storefront.reconciliation import (
    LoggingReconciliationHook,
    ReconciliationEvent,
    ReconciliationHook,
    ReconciliationKind,
)
from storefront.users import repository as users_repo
from . import repository as checkout_repo
from .models import LineItem, PaymentConfirmation

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"


def validate_order(items: Sequence[Tuple[int, int]], payment_method_token: str) -> None:
    if not items or not (payment_method_token or "").strip():
        raise InvalidInput("items and payment_method_id are required")
    for _, quantity in items:
        if quantity <= 0:
            raise InvalidInput("Quantity must be > 0")


class CheckoutService:
    def __init__(
        self,
        store: Store,
        gateway: StripeGateway,
        currency: str,
        reconciliation: Optional[ReconciliationHook] = None,
    ):
        self.store = store
        self.gateway = gateway
        self.currency = currency
        self.reconciliation = reconciliation or LoggingReconciliationHook()

    def checkout(
        self,
        ctx: AuthContext,
        items: Sequence[Tuple[int, int]],
        payment_method_token: str,
    ) -> PaymentConfirmation:
        """
        Paie et enregistre une commande.
        - items: [(product_id, quantity), ...] dans l'ordre de la requête
        - Retour: PaymentConfirmation(success=True, stripe_payment_intent_id=...)
        """
        validate_order(items, payment_method_token)
        token = payment_method_token.strip()

        customer_id = self._customer_id(ctx.user_id)
        lines, total = self.price_lines(items)

        intent = self.gateway.create_and_confirm_payment_intent(
            amount=total,
            currency=self.currency,
            customer_id=customer_id,
            payment_method_id=token,
        )
        if intent.get("status") != SUCCEEDED:
            logger.warning(
                "checkout payment not confirmed user_id=%s intent_id=%s status=%s amount=%s",
                ctx.user_id, intent.get("id"), intent.get("status"), total,
            )
            raise InvalidInput(f"Stripe payment failed: payment not confirmed (status={intent.get('status')})")

        intent_id = intent["id"]
        self._record(ctx.user_id, intent_id, total, lines)
        logger.info(
            "checkout ok user_id=%s intent_id=%s amount=%s lines=%s",
            ctx.user_id, intent_id, total, len(lines),
        )
        return PaymentConfirmation(success=True, stripe_payment_intent_id=intent_id)

    def price_lines(self, items: Sequence[Tuple[int, int]]) -> Tuple[List[LineItem], int]:
        """Calcule les sous-totaux (entiers, centimes) depuis le catalogue; InvalidInput si produit inconnu."""
        lines: List[LineItem] = []
        total = 0
        try:
            with self.store.connect() as conn:
                for product_id, quantity in items:
                    price_cents = products_repo.get_price_cents(conn, product_id)
                    if price_cents is None:
                        raise InvalidInput(f"Product not found: {product_id}")
                    subtotal = int(price_cents) * int(quantity)
                    total += subtotal
                    lines.append(LineItem(product_id=product_id, quantity=quantity, subtotal_cents=subtotal))
        except SQLAlchemyError:
            logger.exception("checkout pricing failed items=%s", list(items))
            raise Internal("Failed to fetch product price")
        return lines, total

    def _customer_id(self, user_id: int) -> str:
        try:
            with self.store.connect() as conn:
                row = users_repo.get_stripe_customer_id(conn, user_id)
        except SQLAlchemyError:
            logger.exception("checkout customer lookup failed user_id=%s", user_id)
            raise Internal("Failed to fetch user")
        if row is None:
            raise NotFound("User not found")
        customer_id = row.get("stripe_customer_id")
        if not customer_id:
            raise InvalidInput("No Stripe customer on file. Add a credit card first.")
        return customer_id

    def _record(self, user_id: int, intent_id: str, total: int, lines: List[LineItem]) -> None:
        try:
            with self.store.begin() as conn:
                checkout_repo.insert_purchases(conn, user_id=user_id, payment_intent_id=intent_id, lines=lines)
        except SQLAlchemyError:
            logger.exception(
                "checkout record failed after charge user_id=%s intent_id=%s amount=%s",
                user_id, intent_id, total,
            )
            event = ReconciliationEvent(
                kind=ReconciliationKind.CHARGE_WITHOUT_PURCHASE,
                user_id=user_id,
                processor_ref=intent_id,
                context={
                    "amount": total,
                    "currency": self.currency,
                    "lines": [(li.product_id, li.quantity, li.subtotal_cents) for li in lines],
                },
            )
            self.reconciliation.report(event)
            raise ReconciliationError("Failed to record purchase", event=event)
