"""Storefront: catalogue, cartes enregistrées chez Stripe et achats multi-articles."""
