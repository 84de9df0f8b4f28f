"""
Gestionnaires d’exceptions.
- StorefrontError -> {"detail": ...} avec le code HTTP de la classe d'erreur.
- Internal: message générique, le détail réel est déjà journalisé par le service.
- RequestValidationError (JSON illisible, champ mal typé) -> 400 au lieu de 422.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.errors import Internal, StorefrontError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers d'erreurs métier et de validation.
    - UX API: code et body JSON pour debug et intégration front.
    """
    @app.exception_handler(StorefrontError)
    async def storefront_error(request: Request, exc: StorefrontError):
        if isinstance(exc, Internal):
            logger.error("internal error path=%s detail=%s", request.url.path, exc.detail)
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.public_detail})
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if any(err.get("type") == "json_invalid" for err in errors):
            return JSONResponse(status_code=400, content={"detail": "Invalid JSON payload"})
        fields = sorted({".".join(str(p) for p in err.get("loc", ())[1:]) or "body" for err in errors})
        return JSONResponse(status_code=400, content={"detail": f"Invalid request: {', '.join(fields)}"})
