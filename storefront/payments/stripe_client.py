"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.

Toutes les erreurs du SDK sont traduites ici:
- PaymentRejected: carte refusée, token invalide/déjà attaché, requête rejetée (-> 400)
- PaymentUnavailable: réseau, authentification, erreur API Stripe (-> 500)
Aucun appel n'est rejoué automatiquement (pas de clé d'idempotence sur les paiements).
"""
import logging
from typing import Any, Dict, Optional

import stripe

from storefront.errors import InvalidInput, Internal

logger = logging.getLogger(__name__)


class PaymentRejected(InvalidInput):
    """Stripe a refusé la requête (carte, token, paiement)."""


class PaymentUnavailable(Internal):
    """Stripe injoignable ou en erreur sans rapport avec l'entrée."""


# module storefront.payments.stripe_client
def require_stripe(api_key: Optional[str] = None) -> stripe:
    """
    Prépare et retourne le module stripe prêt à l’emploi.
    - Configure stripe.api_key via l'argument, sinon via STRIPE_SECRET_KEY.
    - En absence de clé, les appels Stripe échoueront côté SDK (No API key provided)
      et remonteront en PaymentUnavailable.
    """
    if api_key:
        stripe.api_key = api_key
    else:
        from storefront.config import STRIPE_SECRET_KEY
        if STRIPE_SECRET_KEY:
            stripe.api_key = STRIPE_SECRET_KEY
    return stripe


def _translate(action: str, e: Exception, rejectable: bool = True) -> Exception:
    """
    Convertit une erreur du SDK Stripe.
    - rejectable=False: l'appel ne porte aucune donnée client (ex: création du Customer),
      toute erreur devient PaymentUnavailable.
    """
    message = getattr(e, "user_message", None) or str(e) or e.__class__.__name__
    if rejectable and isinstance(e, (stripe.CardError, stripe.InvalidRequestError)):
        logger.warning("stripe.%s rejected: %s", action, message)
        return PaymentRejected(message)
    logger.exception("stripe.%s failed", action)
    return PaymentUnavailable(f"Stripe {action} failed: {message}")


def _card_details(payment_method: Dict[str, Any]) -> Dict[str, Any]:
    card = payment_method.get("card") or {}
    return {
        "brand": str(card.get("brand") or ""),
        "last4": str(card.get("last4") or ""),
        "exp_month": int(card.get("exp_month") or 0),
        "exp_year": int(card.get("exp_year") or 0),
    }


class StripeGateway:
    """
    Passerelle de paiement (customers, payment methods, payment intents).
    Chaque méthode fait un seul appel réseau bloquant et renvoie des dicts simples.
    """

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key

    def create_customer(self, email: str) -> str:
        """Crée un Customer Stripe pour l'email donné et retourne son identifiant (cus_...)."""
        require_stripe(self.api_key)
        try:
            customer = stripe.Customer.create(email=email)
        except stripe.StripeError as e:
            raise _translate("create_customer", e, rejectable=False) from e
        return customer["id"]

    def attach_payment_method(self, payment_method_id: str, customer_id: str) -> Dict[str, Any]:
        """
        Attache un PaymentMethod (pm_...) au Customer.
        Retour: {id, brand, last4, exp_month, exp_year} lus depuis la réponse Stripe.
        """
        require_stripe(self.api_key)
        try:
            pm = stripe.PaymentMethod.attach(payment_method_id, customer=customer_id)
        except stripe.StripeError as e:
            raise _translate("attach_payment_method", e) from e
        record = {"id": pm["id"]}
        record.update(_card_details(pm))
        return record

    def detach_payment_method(self, payment_method_id: str) -> None:
        require_stripe(self.api_key)
        try:
            stripe.PaymentMethod.detach(payment_method_id)
        except stripe.StripeError as e:
            raise _translate("detach_payment_method", e) from e

    def create_and_confirm_payment_intent(
        self,
        *,
        amount: int,
        currency: str,
        customer_id: str,
        payment_method_id: str,
    ) -> Dict[str, Any]:
        """
        Crée et confirme un PaymentIntent limité aux cartes.
        - amount: montant total en centimes (entier)
        - Retour: {id, status, amount, currency}
        """
        require_stripe(self.api_key)
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                customer=customer_id,
                payment_method=payment_method_id,
                confirm=True,
                payment_method_types=["card"],
            )
        except stripe.StripeError as e:
            raise _translate("create_payment_intent", e) from e
        return {
            "id": intent["id"],
            "status": intent.get("status") or "",
            "amount": int(intent.get("amount") or amount),
            "currency": intent.get("currency") or currency,
        }
