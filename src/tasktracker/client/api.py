"""Async HTTP client for the task tracker REST API."""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import httpx
from pydantic import ValidationError as SchemaError

from .config import ClientSettings, get_client_settings
from .errors import ServerError, TransportError, error_from_response
from .models import AuthResult, TaskItem, TaskStatus, UserInfo

logger = logging.getLogger(__name__)

T = TypeVar("T")

INVALID_RESPONSE = "Invalid response from server."


def _decode(data: Any, parse: Callable[[Any], T]) -> T:
    """Apply ``parse`` to a success body; a body of the wrong shape is a ``ServerError``."""
    try:
        return parse(data)
    except (SchemaError, KeyError, TypeError) as exc:
        logger.warning("Response body did not match the expected shape")
        raise ServerError(INVALID_RESPONSE) from exc


class TaskTrackerAPI:
    """Thin typed wrapper over ``httpx.AsyncClient``.

    Every non-2xx answer is raised as the ``ClientError`` subclass matching
    its status; connection failures and timeouts become ``TransportError``.
    A success answer whose body cannot be decoded is a ``ServerError``.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or get_client_settings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self._settings.api_base_url,
            timeout=httpx.Timeout(self._settings.request_timeout_seconds),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "TaskTrackerAPI":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            response = await self._client.request(method, path, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Request failed to reach the server", extra={"method": method, "path": path})
            raise TransportError() from exc

        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                logger.warning(
                    "Response body is not JSON",
                    extra={"method": method, "path": path, "status_code": response.status_code},
                )
                raise ServerError(INVALID_RESPONSE, status_code=response.status_code) from exc

        error = error_from_response(response)
        logger.info(
            "Request rejected",
            extra={"method": method, "path": path, "status_code": response.status_code},
        )
        raise error

    async def register(self, *, name: str, email: str, password: str) -> AuthResult:
        data = await self._request(
            "POST",
            "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        return _decode(data, AuthResult.model_validate)

    async def login(self, *, email: str, password: str) -> AuthResult:
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        return _decode(data, AuthResult.model_validate)

    async def me(self, token: str) -> UserInfo:
        data = await self._request("GET", "/auth/me", token=token)
        return _decode(data, lambda body: UserInfo.model_validate(body["user"]))

    async def update_profile(
        self,
        token: str,
        *,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> UserInfo:
        fields = {"name": name, "email": email, "password": password}
        payload = {key: value for key, value in fields.items() if value is not None}
        data = await self._request("PUT", "/auth/profile", token=token, json=payload)
        return _decode(data, lambda body: UserInfo.model_validate(body["user"]))

    async def list_tasks(self, token: str) -> list[TaskItem]:
        data = await self._request("GET", "/tasks", token=token)
        return _decode(data or [], lambda items: [TaskItem.model_validate(item) for item in items])

    async def create_task(self, token: str, *, title: str, description: str | None = None) -> TaskItem:
        payload: dict[str, Any] = {"title": title}
        if description is not None:
            payload["description"] = description
        data = await self._request("POST", "/tasks", token=token, json=payload)
        return _decode(data, TaskItem.model_validate)

    async def update_task(
        self,
        token: str,
        task_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus | None = None,
    ) -> TaskItem:
        payload: dict[str, Any] = {}
        if title is not None:
            payload["title"] = title
        if description is not None:
            payload["description"] = description
        if status is not None:
            payload["status"] = TaskStatus(status).value
        data = await self._request("PUT", f"/tasks/{task_id}", token=token, json=payload)
        return _decode(data, TaskItem.model_validate)

    async def delete_task(self, token: str, task_id: str) -> None:
        await self._request("DELETE", f"/tasks/{task_id}", token=token)


__all__ = ["TaskTrackerAPI"]
