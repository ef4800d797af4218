"""
Password hashing, JWT issuance and the request-scoped actor dependency.

The booking core never reads identity from ambient state: routes resolve
an `Actor` here and pass its id explicitly into every service call.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from app.core.config import get_settings
from app.domain.enums import UserRole

settings = get_settings()

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

OWNER_ROLES = frozenset({UserRole.OWNER, UserRole.ADMIN})


@dataclass(frozen=True)
class Actor:
    id: int
    role: UserRole

    @property
    def is_owner(self) -> bool:
        return self.role in OWNER_ROLES


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    return pwd_context.verify(password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> Actor:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        user_id = int(payload["sub"])
        role = UserRole(payload.get("role", UserRole.CLIENT.value))
    except (jwt.PyJWTError, KeyError, ValueError, TypeError):
        raise _credentials_exception()
    return Actor(id=user_id, role=role)


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _credentials_exception()
    return decode_access_token(credentials.credentials)


async def require_owner(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Restrict an endpoint to space owners (and admins)."""
    if not actor.is_owner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Owner account required",
        )
    return actor
