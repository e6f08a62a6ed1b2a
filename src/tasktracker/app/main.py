"""FastAPI application factory and the ``tasktracker-api`` entry point."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .db import close_document_store, init_document_store
from .errors import register_exception_handlers

logger = logging.getLogger(__name__)


def _normalise_prefix(raw_prefix: str) -> str:
    """``"api/"`` -> ``"/api"``; an empty or bare ``/`` prefix mounts at the root."""
    stripped = raw_prefix.strip().strip("/")
    return f"/{stripped}" if stripped else ""


def _install_middleware(application: FastAPI, settings: Settings) -> None:
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    # Outermost.
    application.add_middleware(CorrelationIdMiddleware)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API; ``settings`` overrides the cached environment settings."""

    settings = settings or get_settings()
    configure_logging(settings)
    prefix = _normalise_prefix(settings.api_prefix)

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Multi-user task tracker backed by MongoDB.",
        openapi_url=f"{prefix}/openapi.json",
    )
    application.state.settings = settings
    application.dependency_overrides[get_settings] = lambda: settings

    _install_middleware(application, settings)
    application.include_router(api_router, prefix=prefix)
    application.include_router(health_router)
    register_exception_handlers(application)

    @application.on_event("startup")
    async def _open_document_store() -> None:
        await init_document_store(settings=settings)
        logger.info("API ready", extra={"api_prefix": prefix or "/", "environment": settings.environment})

    @application.on_event("shutdown")
    async def _close_document_store() -> None:
        await close_document_store()

    return application


app = create_app()


def run() -> None:
    """Serve ``app`` with uvicorn using the host, port and reload settings."""

    settings = get_settings()
    uvicorn.run(
        "tasktracker.app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )
