from fastapi import Depends, Request

from storefront.auth.models import AuthContext
from storefront.errors import Forbidden, Unauthorized
from storefront.infra.deps import get_store
from storefront.infra.database import Store


def _bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return ""
    return auth_header[7:].strip()


def get_current_user(request: Request) -> AuthContext:
    """
    Produit l'AuthContext typé depuis l'en-tête Authorization: Bearer <jwt>.
    - Jeton absent: Unauthorized("Missing token")
    - Jeton invalide/expiré: Unauthorized("Invalid token")
    """
    token = _bearer_token(request)
    if not token:
        raise Unauthorized("Missing token")

    # Délégué au service Auth
    from storefront.auth.service import decode_jwt
    return decode_jwt(token)


def require_user(user: AuthContext = Depends(get_current_user)) -> AuthContext:
    return user


def require_admin(
    user: AuthContext = Depends(get_current_user),
    store: Store = Depends(get_store),
) -> AuthContext:
    from storefront.auth.service import is_admin
    if not is_admin(store, user):
        raise Forbidden("Forbidden - admin only")
    return user
