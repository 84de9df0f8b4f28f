"""
Taxonomie des erreurs métier du storefront.

Les services lèvent ces exceptions; le handler enregistré par
storefront.app_setup.exceptions les convertit en réponse JSON {"detail": ...}.
- InvalidInput (400): requête invalide, produit inconnu, carte/paiement refusé par Stripe
- Unauthorized (401): identité absente ou invalide
- Forbidden (403): réservé aux admins
- NotFound (404): utilisateur/carte/produit introuvable
- Conflict (409): email ou username déjà pris
- Internal (500): échec base/Stripe sans rapport avec l'entrée; message générique côté client
"""
from typing import Optional


class StorefrontError(Exception):
    status_code = 500
    default_detail = "Erreur serveur"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidInput(StorefrontError):
    status_code = 400
    default_detail = "Requête invalide"


class Unauthorized(StorefrontError):
    status_code = 401
    default_detail = "Unauthorized"


class Forbidden(StorefrontError):
    status_code = 403
    default_detail = "Forbidden - admin only"


class NotFound(StorefrontError):
    status_code = 404
    default_detail = "Not found"


class Conflict(StorefrontError):
    status_code = 409
    default_detail = "Conflict"


class Internal(StorefrontError):
    status_code = 500
    default_detail = "Server error"

    @property
    def public_detail(self) -> str:
        # Le détail réel est journalisé, jamais renvoyé au client
        return self.default_detail


class ReconciliationError(Internal):
    """
    Échec local après un effet déjà appliqué côté Stripe (client créé, carte
    attachée/détachée, paiement encaissé). Porte l'évènement transmis au hook
    de réconciliation.
    """

    def __init__(self, detail: Optional[str] = None, event=None):
        super().__init__(detail)
        self.event = event
