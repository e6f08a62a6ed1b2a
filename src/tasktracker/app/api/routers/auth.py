"""Routes handling registration, login and the current user's profile."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...deps import AuthServiceDependency, CurrentUserDependency
from ...models import User
from ...schemas import (
    AuthResponse,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserEnvelope,
    UserPublic,
)
from ...services import IssuedSession

router = APIRouter(prefix="/auth", tags=["auth"])


def _map_user(user: User) -> UserPublic:
    return UserPublic.model_validate(user)


def _auth_response(issued: IssuedSession) -> AuthResponse:
    return AuthResponse(user=_map_user(issued.user), token=issued.token.token)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Register a new user account",
)
async def register(payload: RegisterRequest, service: AuthServiceDependency) -> AuthResponse:
    issued = await service.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    return _auth_response(issued)


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Authenticate using email and password",
)
async def login(payload: LoginRequest, service: AuthServiceDependency) -> AuthResponse:
    issued = await service.login(email=payload.email, password=payload.password)
    return _auth_response(issued)


@router.get("/me", response_model=UserEnvelope, summary="Return the authenticated user")
async def read_me(current_user: CurrentUserDependency) -> UserEnvelope:
    return UserEnvelope(user=_map_user(current_user))


@router.put("/profile", response_model=UserEnvelope, summary="Update the authenticated user")
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDependency,
    service: AuthServiceDependency,
) -> UserEnvelope:
    user = await service.update_profile(
        current_user.id,
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    return UserEnvelope(user=_map_user(user))
