"""Base repository over beanie documents."""

from __future__ import annotations

from typing import Generic, TypeVar

from beanie import Document, PydanticObjectId
from bson import ObjectId

DocumentType = TypeVar("DocumentType", bound=Document)


def parse_object_id(value: object) -> PydanticObjectId | None:
    """Return ``value`` as an object id, or ``None`` when it is malformed."""
    if isinstance(value, ObjectId):
        return PydanticObjectId(value)
    if isinstance(value, str) and ObjectId.is_valid(value):
        return PydanticObjectId(value)
    return None


class BaseRepository(Generic[DocumentType]):
    """Provide shared persistence helpers for repositories."""

    def __init__(self, model_type: type[DocumentType]) -> None:
        self._model_type = model_type

    async def get(self, entity_id: object) -> DocumentType | None:
        """Retrieve a document by id; malformed ids find nothing."""
        object_id = parse_object_id(entity_id)
        if object_id is None:
            return None
        return await self._model_type.get(object_id)

    async def add(self, instance: DocumentType) -> DocumentType:
        """Insert a new document."""
        await instance.insert()
        return instance

    async def save(self, instance: DocumentType) -> DocumentType:
        """Persist the full document state."""
        await instance.save()
        return instance

    async def delete(self, instance: DocumentType) -> None:
        await instance.delete()
