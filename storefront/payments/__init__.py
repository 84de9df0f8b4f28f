"""
Module 'payments': point d'entrée public de la passerelle Stripe.
Les cas d'usage (cards, checkout) reçoivent une StripeGateway injectée.
"""

from .stripe_client import (
    PaymentRejected,
    PaymentUnavailable,
    StripeGateway,
    require_stripe,
)

__all__ = [
    "PaymentRejected",
    "PaymentUnavailable",
    "StripeGateway",
    "require_stripe",
]
