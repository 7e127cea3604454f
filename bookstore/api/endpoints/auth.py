"""Bearer-token principal extraction.

Tokens are issued elsewhere; this service only verifies them and reads the
caller's id and role from the claims.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional
from uuid import UUID

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bookstore.core.errors import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"

@dataclass(frozen=True)
class Principal:
    id: UUID
    role: UserRole


def decode_principal(token: str, secret_key: str, algorithm: str) -> Principal:
    try:
        claims = jwt.decode(
            token,
            secret_key,
            algorithms=[algorithm],
            options={"require": ["sub", "exp"]},
        )
        return Principal(id=UUID(claims["sub"]), role=UserRole(claims.get("role")))
    except (jwt.PyJWTError, ValueError) as exc:
        logger.info(f"Rejected bearer token: {exc}")
        raise AuthenticationError() from exc


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """Resolve the caller from the Authorization header."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()
    settings = request.app.state.settings
    return decode_principal(credentials.credentials, settings.SECRET_KEY, settings.ALGORITHM)


def check_user_role(roles: List[UserRole]) -> Callable:
    """Dependency factory that only lets callers with one of ``roles`` through."""
    async def role_checker(current_user: Principal = Depends(get_current_user)) -> Principal:
        if current_user.role not in roles:
            raise PermissionDeniedError()
        return current_user

    return role_checker
