"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Store (base SQL): construit ici, schéma créé si AUTO_CREATE_SCHEMA, fermé à l'arrêt.
- Passerelle Stripe et hook de réconciliation: construits ici sauf s'ils ont été
  injectés dans create_app() (tests).
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis).
- Variables d’environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l’init échoue
"""
import os
import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from storefront import config
from storefront.infra.database import Store
from storefront.payments.stripe_client import StripeGateway
from storefront.reconciliation import LoggingReconciliationHook

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except ImportError:
    FakeRedis = None


async def _init_rate_limiter(app: FastAPI, logger: logging.Logger) -> None:
    """
    Configure le rate limiting et gère les fallbacks.
    - En cas d’échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    - Les logs indiquent l’état effectif (enabled/disabled) pour observabilité.
    """
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            if not FakeRedis:
                raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
            r = FakeRedis(decode_responses=True)
        else:
            r = aioredis.from_url(config.RATE_LIMIT_REDIS_URL, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning("Rate limiting falling back to local in-memory due to init error: %s", e)
        else:
            app.state.rate_limit_enabled = False
            logger.warning("Rate limiting disabled due to init error: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")

    store = getattr(app.state, "store", None)
    owns_store = store is None
    if owns_store:
        store = Store(config.DATABASE_URL)
        app.state.store = store
    if config.AUTO_CREATE_SCHEMA:
        store.create_schema()

    if getattr(app.state, "payment_gateway", None) is None:
        if not config.STRIPE_SECRET_KEY:
            logger.warning("STRIPE_SECRET_KEY absent: les appels Stripe échoueront")
        app.state.payment_gateway = StripeGateway(config.STRIPE_SECRET_KEY or None)
    if getattr(app.state, "reconciliation_hook", None) is None:
        app.state.reconciliation_hook = LoggingReconciliationHook()

    await _init_rate_limiter(app, logger)
    try:
        yield
    finally:
        # Phase shutdown
        if owns_store:
            store.dispose()
            app.state.store = None
            logger.info("Database engine disposed")
