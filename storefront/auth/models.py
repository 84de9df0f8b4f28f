from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True)
class AuthContext:
    """Identité authentifiée, produite une fois par get_current_user puis passée explicitement aux services."""
    user_id: int
    username: str = ""


class SignupRequest(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""


class SignupResponse(BaseModel):
    id: int
    username: str
    email: str


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    token: str
