"""HTTP middleware for the task tracker API."""

from __future__ import annotations

from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from .context import REQUEST_ID_HEADER, request_id_scope


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id, reusing the caller's ``X-Request-ID`` when sent.

    The id is stored on ``request.state`` for the exception handlers and
    echoed back in the response header.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = request.headers.get(self.header_name, "").strip()
        request_id = incoming or uuid4().hex
        request.state.request_id = request_id
        with request_id_scope(request_id):
            response = await call_next(request)
        if self.header_name not in response.headers:
            response.headers[self.header_name] = request_id
        return response


__all__ = ["CorrelationIdMiddleware"]
