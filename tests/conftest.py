from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from itertools import count

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from tasktracker.app.core.config import Settings
from tasktracker.app.db import close_document_store, init_document_store
from tasktracker.app.main import create_app


@dataclass(slots=True)
class RegisteredUser:
    id: str
    name: str
    email: str
    password: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        environment="test",
        jwt_secret_key="test-secret-key",
        mongo_database="tasktracker_test",
        access_token_expire_minutes=5,
    )


@pytest.fixture()
async def document_store(settings: Settings) -> AsyncIterator[AsyncMongoMockClient]:
    client = AsyncMongoMockClient()
    await init_document_store(client=client, settings=settings, force=True)
    try:
        yield client
    finally:
        await close_document_store()


@pytest.fixture()
def app(settings: Settings, document_store: AsyncMongoMockClient) -> FastAPI:
    return create_app(settings)


@pytest.fixture()
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as http_client:
        yield http_client


@pytest.fixture()
def register_user(client: AsyncClient) -> Callable[..., Awaitable[RegisteredUser]]:
    counter = count()

    async def _factory(
        *,
        name: str = "Test User",
        email: str | None = None,
        password: str = "secret1",
    ) -> RegisteredUser:
        actual_email = email or f"user-{next(counter)}@example.com"
        response = await client.post(
            "/api/auth/register",
            json={"name": name, "email": actual_email, "password": password},
        )
        assert response.status_code == 200, response.text
        payload = response.json()
        return RegisteredUser(
            id=payload["user"]["id"],
            name=payload["user"]["name"],
            email=payload["user"]["email"],
            password=password,
            token=payload["token"],
        )

    return _factory
