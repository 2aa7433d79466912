"""
Persistence for dynamic field tracking records and their sparse indexes.

Tracking records live in `dynamic_fields`; the indexes live on the target
registration collection and are named ``dyn_<field>_idx``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pymongo import ASCENDING

from schemas.models.dynamic_field import (
    DYNAMIC_FIELDS_COLLECTION,
    DynamicFieldDoc,
    dynamic_index_name,
)
from shared.logging import get_logger

log = get_logger(__name__)


class DynamicFieldRepository:
    def __init__(self, db) -> None:
        self._db = db
        self._tracker = db[DYNAMIC_FIELDS_COLLECTION]

    async def ensure_indexes(self) -> None:
        """Unique (collectionName, fieldName); failure is logged, not raised."""
        try:
            await self._tracker.create_index(
                [("collectionName", ASCENDING), ("fieldName", ASCENDING)],
                unique=True,
            )
        except Exception as e:
            log.warning(
                "dynamic_fields_index_failed",
                error=str(e),
                error_type=type(e).__name__,
            )

    async def list_tracked(self, collection_name: str) -> list[DynamicFieldDoc]:
        rows = await self._tracker.find({"collectionName": collection_name}).to_list(None)
        return [DynamicFieldDoc.from_mongo(row) for row in rows]

    async def track(
        self, collection_name: str, field_name: str, orig_name: str, field_type: str
    ) -> None:
        doc = DynamicFieldDoc(
            collectionName=collection_name,
            fieldName=field_name,
            origName=orig_name,
            fieldType=field_type,
            createdAt=datetime.now(timezone.utc),
        )
        await self._tracker.update_one(
            {"collectionName": collection_name, "fieldName": field_name},
            {"$set": doc.to_mongo()},
            upsert=True,
        )

    async def untrack(self, doc: DynamicFieldDoc) -> None:
        if doc.id is not None:
            await self._tracker.delete_one({"_id": doc.id})
        else:
            await self._tracker.delete_one(
                {"collectionName": doc.collection_name, "fieldName": doc.field_name}
            )

    async def create_sparse_index(self, collection_name: str, field_name: str) -> str:
        return await self._db[collection_name].create_index(
            [(field_name, ASCENDING)],
            name=dynamic_index_name(field_name),
            sparse=True,
        )

    async def drop_index_if_exists(self, collection_name: str, field_name: str) -> bool:
        col = self._db[collection_name]
        name = dynamic_index_name(field_name)
        existing = await col.index_information()
        if name not in existing:
            return False
        await col.drop_index(name)
        return True
