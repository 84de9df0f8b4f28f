"""
Middlewares HTTP de l'API JSON.
- register_basic_middlewares: CORS (jeton Bearer, pas de cookies) et filtrage du Host.
- register_security_middleware: en-têtes de sécurité sur toutes les réponses.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from storefront.config import ALLOWED_HOSTS, CORS_ORIGINS, COOKIE_SECURE

API_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
API_HEADERS = ["Authorization", "Content-Type"]


def register_basic_middlewares(app: FastAPI) -> None:
    """
    - CORS: origines issues de CORS_ORIGINS; l'authentification passe par
      l'en-tête Authorization, les credentials navigateur ne sont pas exposés.
    - TrustedHost: ALLOWED_HOSTS ("*" pour tout accepter).
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=API_METHODS,
        allow_headers=API_HEADERS,
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=ALLOWED_HOSTS or ["*"])


def register_security_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        headers = response.headers
        headers.setdefault("X-Frame-Options", "DENY")
        headers.setdefault("X-Content-Type-Options", "nosniff")
        headers.setdefault("Referrer-Policy", "no-referrer")
        # Réponses liées à un utilisateur (cartes, achats): jamais mises en cache
        headers.setdefault("Cache-Control", "no-store")
        if COOKIE_SECURE:
            headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains")
        return response
