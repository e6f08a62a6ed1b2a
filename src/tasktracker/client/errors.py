"""Typed errors raised by the task tracker client."""

from __future__ import annotations

from typing import Any

import httpx


class ClientError(Exception):
    """Base class for every failure the client surfaces."""

    default_message = "Something went wrong."

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: Any | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.status_code = status_code
        self.code = code
        self.details = details

    @property
    def field_errors(self) -> list[dict[str, str]]:
        """Field-level problems reported alongside a validation failure."""
        if isinstance(self.details, dict):
            errors = self.details.get("errors")
            if isinstance(errors, list):
                return [item for item in errors if isinstance(item, dict)]
        return []


class ValidationError(ClientError):
    default_message = "Validation failed."


class AuthError(ClientError):
    default_message = "Not authorized."


class NotFoundError(ClientError):
    default_message = "Not found."


class ConflictError(ClientError):
    default_message = "Already exists."


class ServerError(ClientError):
    default_message = "Internal server error."


class TransportError(ClientError):
    """The server could not be reached or did not answer in time."""

    default_message = "Could not reach the server."


_STATUS_ERRORS: dict[int, type[ClientError]] = {
    400: ValidationError,
    401: AuthError,
    404: NotFoundError,
    409: ConflictError,
}


def error_from_response(response: httpx.Response) -> ClientError:
    """Decode an error envelope into the matching ``ClientError`` subclass."""

    message: str | None = None
    code: str | None = None
    details: Any | None = None
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        raw_message = payload.get("message")
        message = raw_message if isinstance(raw_message, str) else None
        raw_code = payload.get("code")
        code = raw_code if isinstance(raw_code, str) else None
        details = payload.get("details")

    error_type = _STATUS_ERRORS.get(response.status_code)
    if error_type is None:
        error_type = ServerError if response.status_code >= 500 else ClientError
    return error_type(message, status_code=response.status_code, code=code, details=details)


__all__ = [
    "AuthError",
    "ClientError",
    "ConflictError",
    "NotFoundError",
    "ServerError",
    "TransportError",
    "ValidationError",
    "error_from_response",
]
