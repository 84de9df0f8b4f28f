"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `storefront.asgi:app`.
- Toute la configuration FastAPI est centralisée dans storefront.app.create_app().
"""

from storefront.app import create_app

app = create_app()
