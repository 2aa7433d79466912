"""Storage of per-registration-type page configs in `registration_configs`."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from schemas.models.registration_config import REGISTRATION_CONFIGS_COLLECTION


class RegistrationConfigRepository:
    def __init__(self, db) -> None:
        self._col = db[REGISTRATION_CONFIGS_COLLECTION]

    async def get(self, page: str) -> Optional[dict]:
        doc = await self._col.find_one({"page": page})
        if not doc:
            return None
        config = doc.get("config")
        return config if isinstance(config, dict) else None

    async def upsert(self, page: str, config: dict) -> None:
        now = datetime.now(timezone.utc)
        await self._col.update_one(
            {"page": page},
            {"$set": {"config": config, "updatedAt": now}, "$setOnInsert": {"createdAt": now}},
            upsert=True,
        )

    async def delete(self, page: str) -> bool:
        result = await self._col.delete_one({"page": page})
        return result.deleted_count == 1
