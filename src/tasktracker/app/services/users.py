"""Credential store operations: creating users and updating profiles."""

from __future__ import annotations

import logging

from ..core.security import get_password_hash
from ..errors import ConflictError, NotFoundError
from ..models import User, utcnow
from ..repositories import UserRepository
from ..schemas.validators import check_password, clean_email, clean_name
from .checks import checked

logger = logging.getLogger(__name__)


class UserService:
    """Validates user fields and keeps emails unique."""

    def __init__(self, repository: UserRepository | None = None) -> None:
        self._repository = repository or UserRepository()

    async def create_user(self, *, name: str, email: str, password: str) -> User:
        """Validate, hash and persist a new user."""
        name = checked("name", clean_name, name)
        email = checked("email", clean_email, email)
        password = checked("password", check_password, password)
        if await self._repository.get_by_email(email) is not None:
            raise ConflictError("User already exists.")
        user = User(name=name, email=email, hashed_password=get_password_hash(password))
        await self._repository.add(user)
        logger.info("User registered", extra={"user_id": str(user.id)})
        return user

    async def get_user(self, user_id: object) -> User | None:
        return await self._repository.get(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        return await self._repository.get_by_email(email)

    async def update_user(
        self,
        user_id: object,
        *,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> User:
        """Apply only the supplied fields and persist the user."""
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        if name is not None:
            user.name = checked("name", clean_name, name)
        if email is not None:
            email = checked("email", clean_email, email)
            if email != user.email:
                existing = await self._repository.get_by_email(email)
                if existing is not None and existing.id != user.id:
                    raise ConflictError("Email is already in use.")
                user.email = email
        if password is not None:
            password = checked("password", check_password, password)
            user.hashed_password = get_password_hash(password)
        user.updated_at = utcnow()
        await self._repository.save(user)
        return user


__all__ = ["UserService"]
