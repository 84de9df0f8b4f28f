from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from storefront.infra.database import Store
from storefront.infra.deps import get_store
from storefront.utils.rate_limit import optional_rate_limit
from .models import LoginRequest, LoginResponse, SignupRequest, SignupResponse
from .service import login as svc_login, signup as svc_signup

router = APIRouter(tags=["Auth"])


@router.post(
    "/signup",
    status_code=HTTP_201_CREATED,
    response_model=SignupResponse,
    dependencies=[Depends(optional_rate_limit(times=3, seconds=60))],
)
def api_signup(req: SignupRequest, store: Store = Depends(get_store)):
    """Inscription (API JSON).
    - Applique un rate limit (3 requêtes par 60 secondes via la dépendance).
    - 400 si un champ manque, 409 si email/username déjà pris.
    """
    return svc_signup(store, req.username, req.email, req.password)


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(optional_rate_limit(times=3, seconds=60))],
)
def api_login(req: LoginRequest, store: Store = Depends(get_store)):
    """Connexion: retourne {"token": "<jwt>"} à passer en Authorization: Bearer."""
    return {"token": svc_login(store, req.email, req.password)}
