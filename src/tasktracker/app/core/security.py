"""Password hashing and stateless bearer tokens (HS256 JWT)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any
from uuid import uuid4

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .config import Settings

ACCESS_TOKEN_TYPE = "access"

password_hasher = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True, slots=True)
class AccessToken:
    """A minted token; ``jti`` identifies it in logs without exposing it."""

    token: str
    subject: str
    expires_at: datetime
    jti: str


def get_password_hash(password: str) -> str:
    return password_hasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return password_hasher.verify(plain_password, hashed_password)


@lru_cache(maxsize=1)
def _decoy_hash() -> str:
    return password_hasher.hash(uuid4().hex)


def burn_password_check(plain_password: str) -> None:
    """Run one bcrypt verification against a decoy hash.

    Called when the email is unknown so that rejecting a missing account
    takes as long as rejecting a wrong password.
    """

    password_hasher.verify(plain_password, _decoy_hash())


def create_access_token(
    *,
    subject: str,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> AccessToken:
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta if expires_delta is not None else timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, Any] = {
        "sub": str(subject),
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "jti": uuid4().hex,
        "type": ACCESS_TOKEN_TYPE,
    }
    encoded = jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return AccessToken(token=encoded, subject=claims["sub"], expires_at=claims["exp"], jti=claims["jti"])


def decode_token(*, token: str, secret: str, algorithm: str) -> dict[str, Any]:
    """Return the verified claims; raises ``JWTError`` (or ``ExpiredSignatureError``)."""

    return jwt.decode(token, secret, algorithms=[algorithm])


__all__ = [
    "ACCESS_TOKEN_TYPE",
    "AccessToken",
    "ExpiredSignatureError",
    "JWTError",
    "burn_password_check",
    "create_access_token",
    "decode_token",
    "get_password_hash",
    "verify_password",
]
