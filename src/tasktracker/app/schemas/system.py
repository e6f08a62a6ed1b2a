"""Service metadata, health and error envelope models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class RootResponse(BaseModel):
    name: str = Field(description="Service name")
    environment: str = Field(description="Active settings profile")
    version: str = Field(description="Package version")
    api_prefix: str = Field(description="Path under which /auth and /tasks are mounted")


class HealthCheckResponse(BaseModel):
    """Liveness plus document store reachability."""

    status: Literal["OK", "DEGRADED"] = "OK"
    database: Literal["connected", "disconnected"] = "connected"
    version: str | None = None


class ErrorResponse(BaseModel):
    """Envelope used for every non-2xx answer."""

    code: str = Field(description="Stable machine-readable identifier, e.g. validation_error")
    message: str = Field(description="Message safe to show to the end user")
    details: Any | None = Field(default=None, description="Field errors and the request id")


__all__ = ["ErrorResponse", "HealthCheckResponse", "RootResponse"]
