"""
Cas d'usage 'cards': registre des cartes enregistrées chez Stripe.

- Un utilisateur a au plus un Customer Stripe, créé au premier ajout de carte
  puis conservé dans users.stripe_customer_id.
- Ordre des effets: Stripe d'abord, base locale ensuite. Si l'écriture locale
  échoue après un effet Stripe, l'écart est signalé au hook de réconciliation
  (aucune compensation automatique).
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from storefront.auth.models import AuthContext
from storefront.errors import InvalidInput, Internal, NotFound, ReconciliationError
from storefront.infra.database import Store
from storefront.payments.stripe_client import StripeGateway
from storefront.reconciliation import (
    LoggingReconciliationHook,
    ReconciliationEvent,
    ReconciliationHook,
    ReconciliationKind,
)
from storefront.users import repository as users_repo
from . import repository as cards_repo
from .models import StoredCard

logger = logging.getLogger(__name__)


class CardRegistry:
    def __init__(
        self,
        store: Store,
        gateway: StripeGateway,
        reconciliation: Optional[ReconciliationHook] = None,
    ):
        self.store = store
        self.gateway = gateway
        self.reconciliation = reconciliation or LoggingReconciliationHook()

    def attach_card(self, ctx: AuthContext, payment_method_token: str) -> StoredCard:
        """
        Attache un PaymentMethod au Customer Stripe de l'utilisateur et le mémorise.
        Étapes:
          1) Charger email + stripe_customer_id (NotFound si utilisateur absent)
          2) Créer le Customer Stripe si absent puis le persister
          3) Attacher le token au Customer (InvalidInput si Stripe refuse)
          4) Insérer credit_cards avec les métadonnées renvoyées par Stripe
        """
        token = (payment_method_token or "").strip()
        if not token:
            raise InvalidInput("payment_method_id is required")

        customer_id = self._ensure_customer(ctx.user_id)
        pm = self.gateway.attach_payment_method(token, customer_id)

        try:
            with self.store.begin() as conn:
                card_id = cards_repo.insert_card(
                    conn,
                    user_id=ctx.user_id,
                    stripe_payment_method_id=pm["id"],
                    brand=pm["brand"],
                    last4=pm["last4"],
                    exp_month=pm["exp_month"],
                    exp_year=pm["exp_year"],
                )
        except IntegrityError:
            # Stripe accepte de réattacher au même Customer: la carte est déjà enregistrée, rien d'orphelin
            logger.info("cards.attach_card already saved user_id=%s pm_id=%s", ctx.user_id, pm["id"])
            raise InvalidInput("Credit card already saved")
        except SQLAlchemyError:
            logger.exception(
                "cards.attach_card insert failed user_id=%s pm_id=%s brand=%s last4=%s exp_month=%s exp_year=%s",
                ctx.user_id, pm["id"], pm["brand"], pm["last4"], pm["exp_month"], pm["exp_year"],
            )
            raise self._orphan(
                ReconciliationKind.ORPHAN_ATTACHED_METHOD,
                ctx.user_id,
                pm["id"],
                {"customer_id": customer_id},
                "Failed to save credit card",
            )

        logger.info("cards.attach_card user_id=%s card_id=%s pm_id=%s", ctx.user_id, card_id, pm["id"])
        return StoredCard(
            id=card_id,
            user_id=ctx.user_id,
            stripe_payment_method_id=pm["id"],
            brand=pm["brand"],
            last4=pm["last4"],
            exp_month=pm["exp_month"],
            exp_year=pm["exp_year"],
        )

    def detach_card(self, ctx: AuthContext, card_id: int) -> None:
        """Détache la carte chez Stripe puis supprime la ligne locale (NotFound si absente ou d'un autre utilisateur)."""
        try:
            with self.store.connect() as conn:
                card = cards_repo.get_card_for_user(conn, card_id, ctx.user_id)
        except SQLAlchemyError:
            logger.exception("cards.detach_card lookup failed user_id=%s card_id=%s", ctx.user_id, card_id)
            raise Internal()
        if not card:
            raise NotFound("Credit card not found")

        pm_id = card["stripe_payment_method_id"]
        self.gateway.detach_payment_method(pm_id)

        try:
            with self.store.begin() as conn:
                deleted = cards_repo.delete_card(conn, card_id, ctx.user_id)
        except SQLAlchemyError:
            logger.exception("cards.detach_card delete failed user_id=%s card_id=%s pm_id=%s", ctx.user_id, card_id, pm_id)
            raise self._orphan(
                ReconciliationKind.ORPHAN_DETACHED_METHOD,
                ctx.user_id,
                pm_id,
                {"card_id": card_id},
                "Server error deleting credit card",
            )
        if deleted == 0:
            # Supprimée entre la lecture et l'écriture (requête concurrente)
            raise NotFound("Credit card not found")
        logger.info("cards.detach_card user_id=%s card_id=%s pm_id=%s", ctx.user_id, card_id, pm_id)

    def _ensure_customer(self, user_id: int) -> str:
        try:
            with self.store.connect() as conn:
                billing = users_repo.get_user_billing(conn, user_id)
        except SQLAlchemyError:
            logger.exception("cards.ensure_customer lookup failed user_id=%s", user_id)
            raise Internal()
        if billing is None:
            raise NotFound("User not found")
        if billing.get("stripe_customer_id"):
            return billing["stripe_customer_id"]

        customer_id = self.gateway.create_customer(billing["email"])
        current: Optional[Dict[str, Any]] = None
        try:
            with self.store.begin() as conn:
                updated = users_repo.set_stripe_customer_id(conn, user_id, customer_id)
                if not updated:
                    current = users_repo.get_stripe_customer_id(conn, user_id)
        except SQLAlchemyError:
            logger.exception("cards.ensure_customer update failed user_id=%s customer_id=%s", user_id, customer_id)
            raise self._orphan(
                ReconciliationKind.ORPHAN_CUSTOMER,
                user_id,
                customer_id,
                {"email": billing["email"]},
                "Server error updating stripe_customer_id",
            )

        if updated:
            logger.info("cards.ensure_customer created user_id=%s customer_id=%s", user_id, customer_id)
            return customer_id

        # Un ajout concurrent a déjà enregistré un Customer: le nôtre reste orphelin chez Stripe
        existing = (current or {}).get("stripe_customer_id")
        self.reconciliation.report(ReconciliationEvent(
            kind=ReconciliationKind.ORPHAN_CUSTOMER,
            user_id=user_id,
            processor_ref=customer_id,
            context={"email": billing["email"], "kept_customer_id": existing},
        ))
        if not existing:
            raise NotFound("User not found")
        return existing

    def _orphan(
        self,
        kind: ReconciliationKind,
        user_id: int,
        processor_ref: str,
        context: Dict[str, Any],
        detail: str,
    ) -> ReconciliationError:
        event = ReconciliationEvent(kind=kind, user_id=user_id, processor_ref=processor_ref, context=context)
        self.reconciliation.report(event)
        return ReconciliationError(detail, event=event)
