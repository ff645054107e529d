"""
Password hashing (bcrypt) and HS256 access tokens.

Token claims: sub (user id), role, iat, exp.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from src.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenError(Exception):
    """JWT is malformed, signed with another key or expired."""

    def __init__(self, message: str, expired: bool = False):
        self.expired = expired
        super().__init__(message)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(
    subject: str | int,
    expires_delta: timedelta | None = None,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Sign a token for `subject`; lifetime defaults to ACCESS_TOKEN_EXPIRE_MINUTES."""
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, Any] = {
        **(extra_claims or {}),
        "sub": str(subject),
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError as e:
        raise TokenError("Token has expired", expired=True) from e
    except JWTError as e:
        raise TokenError("Invalid token") from e
