"""Error taxonomy of the task tracker API and the handlers that render it.

Every failure leaves the service as the same envelope::

    {"code": "...", "message": "...", "details": {..., "request_id": "..."}}

Domain code raises an ``ApplicationError`` subclass; framework errors
(request validation, unknown routes, duplicate keys, anything unhandled) are
translated here so routes never build error responses themselves.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, Mapping, Sequence

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from .core.context import REQUEST_ID_HEADER, request_id_scope
from .schemas.system import ErrorResponse

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = frozenset({"body", "query", "path", "header"})
_VALUE_ERROR_PREFIX = "Value error, "


class ApplicationError(Exception):
    """Base class for errors the API reports to its callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "application_error"
    default_message: str = "Request could not be processed."

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        self.headers = dict(headers) if headers else None


class ValidationError(ApplicationError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    default_message = "Validation failed."

    @classmethod
    def for_field(cls, field: str, msg: str) -> "ValidationError":
        return cls(details={"errors": [{"field": field, "msg": msg}]})


class AuthError(ApplicationError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    default_message = "Could not validate credentials."

    def __init__(self, message: str | None = None, *, details: Any | None = None) -> None:
        super().__init__(message, details=details, headers={"WWW-Authenticate": "Bearer"})


class NotFoundError(ApplicationError):
    """Missing resource, or one owned by somebody else."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Resource not found."


class ConflictError(ApplicationError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Resource already exists."


class ServerError(ApplicationError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "server_error"
    default_message = "Internal server error."


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def _code_for_status(status_code: int) -> str:
    phrase = _status_phrase(status_code)
    return "http_error" if phrase == "Error" else phrase.lower().replace(" ", "_").replace("'", "")


def _with_request_id(request_id: str | None, details: Any | None) -> Any | None:
    if not request_id:
        return details
    if details is None:
        return {"request_id": request_id}
    if isinstance(details, dict):
        return {"request_id": request_id, **details} if "request_id" not in details else details
    return {"request_id": request_id, "detail": details}


def error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    """Render the error envelope, tagging it with the request's correlation id."""

    request_id = getattr(request.state, "request_id", None)
    body = ErrorResponse(code=code, message=message, details=_with_request_id(request_id, details))
    response = JSONResponse(status_code=status_code, content=body.model_dump(), headers=dict(headers or {}))
    if request_id and REQUEST_ID_HEADER not in response.headers:
        response.headers[REQUEST_ID_HEADER] = request_id
    return response


def field_errors(errors: Sequence[Mapping[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic error entries into ``{field, msg}`` pairs."""

    flattened: list[dict[str, str]] = []
    for error in errors:
        location = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_PREFIXES]
        message = str(error.get("msg", "Invalid value."))
        flattened.append(
            {
                "field": ".".join(location) or "body",
                "msg": message.removeprefix(_VALUE_ERROR_PREFIX),
            }
        )
    return flattened


def _log_failure(request: Request, status_code: int, code: str, event: str) -> None:
    level = logging.ERROR if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logging.WARNING
    logger.log(level, event, extra={"code": code, "status_code": status_code, "path": request.url.path})


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-producing handlers on ``app``."""

    @app.exception_handler(ApplicationError)
    async def _application_error(request: Request, exc: ApplicationError) -> JSONResponse:
        with request_id_scope(getattr(request.state, "request_id", "-")):
            _log_failure(request, exc.status_code, exc.code, "Application error encountered")
            return error_response(
                request,
                status_code=exc.status_code,
                code=exc.code,
                message=exc.message,
                details=exc.details,
                headers=exc.headers,
            )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = field_errors(exc.errors())
        with request_id_scope(getattr(request.state, "request_id", "-")):
            logger.warning("Request validation failed", extra={"errors": errors, "path": request.url.path})
            return error_response(
                request,
                status_code=ValidationError.status_code,
                code=ValidationError.code,
                message=ValidationError.default_message,
                details={"errors": errors},
            )

    @app.exception_handler(DuplicateKeyError)
    async def _duplicate_key(request: Request, exc: DuplicateKeyError) -> JSONResponse:
        with request_id_scope(getattr(request.state, "request_id", "-")):
            _log_failure(request, ConflictError.status_code, ConflictError.code, "Duplicate key rejected")
            return error_response(
                request,
                status_code=ConflictError.status_code,
                code=ConflictError.code,
                message=ConflictError.default_message,
            )

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        code = _code_for_status(exc.status_code)
        if isinstance(exc.detail, str):
            message, details = exc.detail, None
        else:
            message = _status_phrase(exc.status_code)
            details = {"errors": exc.detail} if isinstance(exc.detail, list) else exc.detail
        with request_id_scope(getattr(request.state, "request_id", "-")):
            _log_failure(request, exc.status_code, code, "HTTP exception raised")
            return error_response(
                request,
                status_code=exc.status_code,
                code=code,
                message=message,
                details=details,
                headers=exc.headers,
            )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        with request_id_scope(getattr(request.state, "request_id", "-")):
            logger.exception("Unhandled application error")
            return error_response(
                request,
                status_code=ServerError.status_code,
                code=ServerError.code,
                message=ServerError.default_message,
            )


__all__ = [
    "ApplicationError",
    "AuthError",
    "ConflictError",
    "NotFoundError",
    "ServerError",
    "ValidationError",
    "error_response",
    "field_errors",
    "register_exception_handlers",
]
