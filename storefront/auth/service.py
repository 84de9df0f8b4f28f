"""
Cas d'usage Auth: inscription, connexion, émission/vérification des JWT.
- Mots de passe: bcrypt (sel auto)
- Jetons: HS256 via PyJWT, claims user_id/username/iat/exp
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import jwt
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from storefront import config
from storefront.errors import Conflict, InvalidInput, Internal, Unauthorized
from storefront.infra.database import Store
from storefront.users import repository as users_repo
from .models import AuthContext

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Hash stocké illisible: traité comme un mot de passe faux
        logger.warning("auth.verify_password: unreadable stored hash")
        return False


def create_jwt(user_id: int, username: str) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "user_id": user_id,
        "username": username,
        "iat": now,
        "exp": now + timedelta(hours=config.JWT_EXPIRATION_HOURS),
    }
    return jwt.encode(claims, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_jwt(token: str) -> AuthContext:
    """Vérifie signature et expiration; lève Unauthorized si le jeton est invalide."""
    try:
        claims = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.PyJWTError:
        raise Unauthorized("Invalid token")
    user_id = claims.get("user_id")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise Unauthorized("Invalid token")
    return AuthContext(user_id=user_id, username=str(claims.get("username") or ""))


def signup(store: Store, username: str, email: str, password: str) -> Dict[str, Any]:
    """Inscription:
    - username, email et password requis
    - Hash bcrypt puis insertion; doublon email/username -> Conflict
    """
    username = (username or "").strip()
    email = (email or "").strip()
    if not username or not email or not password:
        raise InvalidInput("username, email, and password are required")

    password_hash = hash_password(password)
    try:
        with store.begin() as conn:
            user_id = users_repo.insert_user(conn, username=username, email=email, password_hash=password_hash)
    except IntegrityError:
        raise Conflict("Email or username already taken")
    except SQLAlchemyError:
        logger.exception("auth.signup failed email=%s username=%s", email, username)
        raise Internal("Failed to create user")
    logger.info("auth.signup user_id=%s", user_id)
    return {"id": user_id, "username": username, "email": email}


def login(store: Store, email: str, password: str) -> str:
    """Connexion: vérifie le mot de passe et retourne un JWT signé."""
    email = (email or "").strip()
    if not email or not password:
        raise InvalidInput("email and password are required")
    try:
        with store.connect() as conn:
            user = users_repo.get_user_by_email(conn, email)
    except SQLAlchemyError:
        logger.exception("auth.login lookup failed email=%s", email)
        raise Internal()
    if not user or not verify_password(password, user["password"]):
        raise Unauthorized("Invalid credentials")
    return create_jwt(user["id"], user["username"])


def is_admin(store: Store, ctx: AuthContext) -> bool:
    try:
        with store.connect() as conn:
            return users_repo.is_admin(conn, ctx.user_id)
    except SQLAlchemyError:
        logger.exception("auth.is_admin failed user_id=%s", ctx.user_id)
        raise Internal()
