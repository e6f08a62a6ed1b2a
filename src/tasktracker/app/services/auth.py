"""Session issuing: registration, login and bearer token verification."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.config import Settings
from ..core.security import (
    ACCESS_TOKEN_TYPE,
    AccessToken,
    ExpiredSignatureError,
    JWTError,
    burn_password_check,
    create_access_token,
    decode_token,
    verify_password,
)
from ..errors import AuthError, ServerError
from ..models import User
from ..schemas.validators import clean_email, require_password
from .checks import checked
from .users import UserService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IssuedSession:
    """A user together with the token minted for them."""

    user: User
    token: AccessToken


class AuthService:
    """Stateless token issuing backed by the credential store."""

    def __init__(self, settings: Settings, user_service: UserService | None = None) -> None:
        self._settings = settings
        self._user_service = user_service or UserService()

    def issue_token(self, user: User) -> AccessToken:
        if user.id is None:
            raise ServerError("User must be persisted before issuing tokens.")
        return create_access_token(subject=str(user.id), settings=self._settings)

    async def register(self, *, name: str, email: str, password: str) -> IssuedSession:
        user = await self._user_service.create_user(name=name, email=email, password=password)
        return IssuedSession(user=user, token=self.issue_token(user))

    async def login(self, *, email: str, password: str) -> IssuedSession:
        email = checked("email", clean_email, email)
        password = checked("password", require_password, password)
        user = await self._user_service.get_user_by_email(email)
        if user is None:
            burn_password_check(password)
            raise AuthError("Invalid credentials.")
        if not verify_password(password, user.hashed_password):
            raise AuthError("Invalid credentials.")
        logger.info("User signed in", extra={"user_id": str(user.id)})
        return IssuedSession(user=user, token=self.issue_token(user))

    def verify(self, token: str) -> str:
        """Return the user id carried by ``token``."""
        try:
            payload = decode_token(
                token=token,
                secret=self._settings.jwt_secret_key,
                algorithm=self._settings.jwt_algorithm,
            )
        except ExpiredSignatureError as exc:
            raise AuthError("Token has expired.") from exc
        except JWTError as exc:
            raise AuthError("Could not validate credentials.") from exc

        if payload.get("type") != ACCESS_TOKEN_TYPE:
            raise AuthError("Invalid token type.")
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise AuthError("Invalid token subject.")
        return subject

    async def authenticate(self, token: str) -> User:
        """Resolve ``token`` to a stored user."""
        user = await self._user_service.get_user(self.verify(token))
        if user is None:
            raise AuthError("User no longer exists.")
        return user

    async def update_profile(
        self,
        user_id: object,
        *,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> User:
        return await self._user_service.update_user(user_id, name=name, email=email, password=password)


__all__ = ["AuthService", "IssuedSession"]
