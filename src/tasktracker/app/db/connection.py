"""Motor client and beanie initialisation for the task tracker documents."""

from __future__ import annotations

import asyncio
import logging

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from ..core.config import Settings, get_settings
from ..models import Task, User

logger = logging.getLogger(__name__)

_client: AsyncIOMotorClient | None = None
_database: AsyncIOMotorDatabase | None = None
_initialized = False
_lock = asyncio.Lock()


def set_document_client(client: AsyncIOMotorClient | None) -> None:
    """Inject a custom motor client instance (primarily for tests)."""

    global _client, _database, _initialized
    _client = client
    _database = None
    _initialized = False


async def init_document_store(
    *,
    client: AsyncIOMotorClient | None = None,
    settings: Settings | None = None,
    force: bool = False,
) -> None:
    """Connect to MongoDB and register the document models with beanie.

    A store that cannot be reached raises here; callers treat that as fatal.
    """

    global _client, _database, _initialized

    async with _lock:
        if client is not None:
            set_document_client(client)

        if _initialized and not force:
            return

        settings = settings or get_settings()
        if _client is None:
            _client = AsyncIOMotorClient(
                settings.mongo_url,
                tz_aware=True,
                serverSelectionTimeoutMS=settings.mongo_connect_timeout_ms,
            )
        _database = _client[settings.mongo_database]

        await init_beanie(database=_database, document_models=[User, Task])
        _initialized = True
        logger.info("Document store initialised", extra={"database": settings.mongo_database})


async def close_document_store() -> None:
    """Dispose the MongoDB client."""

    global _client, _database, _initialized
    client = _client
    if client is not None:
        client.close()
    _client = None
    _database = None
    _initialized = False


async def ping_document_store() -> bool:
    """Return ``True`` when the database answers a ``ping`` command."""

    if _database is None:
        return False
    try:
        await _database.command("ping")
    except PyMongoError:
        logger.warning("Document store ping failed", exc_info=True)
        return False
    return True
