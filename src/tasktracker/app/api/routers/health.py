"""Health and service metadata endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ...db import ping_document_store
from ...deps import SettingsDependency
from ...schemas.system import HealthCheckResponse, RootResponse

router = APIRouter(tags=["system"])


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": HealthCheckResponse}},
)
async def read_health(settings: SettingsDependency) -> HealthCheckResponse | JSONResponse:
    """Report whether the document store answers a ping."""
    if await ping_document_store():
        return HealthCheckResponse(status="OK", database="connected", version=settings.version)
    degraded = HealthCheckResponse(status="DEGRADED", database="disconnected", version=settings.version)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=degraded.model_dump())


@router.get("/", response_model=RootResponse, summary="Service metadata")
async def read_root(settings: SettingsDependency) -> RootResponse:
    return RootResponse(
        name=settings.project_name,
        environment=settings.environment,
        version=settings.version,
        api_prefix=settings.api_prefix,
    )
