"""
Dynamic field synchronizer.

Keeps the tracking records and sparse indexes of a registration collection in
line with the fields an admin configured for it. Every step is idempotent and
there is no transaction; failures are collected in ``SyncResult.errors`` and a
later run converges.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from repositories.dynamic_field_repository import DynamicFieldRepository
from schemas.dto.responses.registration_config import SyncError, SyncResult
from shared.field_names import safe_field_name
from shared.logging import get_logger

log = get_logger(__name__)


def _field_attr(field: Any, key: str) -> Any:
    if isinstance(field, Mapping):
        return field.get(key)
    return getattr(field, key, None)


class FieldSyncService:
    def __init__(self, repo: DynamicFieldRepository) -> None:
        self._repo = repo

    @staticmethod
    def normalize(raw_name: Any) -> Optional[str]:
        return safe_field_name(raw_name)

    def _desired(self, fields: Iterable[Any]) -> dict[str, tuple[str, str]]:
        desired: dict[str, tuple[str, str]] = {}
        for field in fields or []:
            raw = _field_attr(field, "name")
            if not raw or not str(raw).strip():
                continue
            name = self.normalize(raw)
            if not name or name in desired:
                continue
            field_type = _field_attr(field, "type") or "text"
            desired[name] = (str(raw), str(field_type))
        return desired

    async def sync(self, collection_name: str, fields: Iterable[Any]) -> SyncResult:
        if not collection_name:
            raise ValueError("collection_name required")

        desired = self._desired(fields)
        tracked = {doc.field_name: doc for doc in await self._repo.list_tracked(collection_name)}

        to_add = [name for name in desired if name not in tracked]
        to_remove = [name for name in tracked if name not in desired]
        result = SyncResult()

        for name in to_add:
            orig_name, field_type = desired[name]
            try:
                await self._repo.track(collection_name, name, orig_name, field_type)
            except Exception as e:
                log.warning(
                    "dynamic_field_track_failed",
                    collection=collection_name,
                    field=name,
                    error=str(e),
                )
                result.errors.append(SyncError(action="trackAdd", field=name, error=str(e)))
                continue
            try:
                await self._repo.create_sparse_index(collection_name, name)
            except Exception as e:
                log.warning(
                    "dynamic_field_index_failed",
                    collection=collection_name,
                    field=name,
                    error=str(e),
                )
                result.errors.append(SyncError(action="createIndex", field=name, error=str(e)))
            result.added.append(name)

        for name in to_remove:
            try:
                await self._repo.drop_index_if_exists(collection_name, name)
            except Exception as e:
                log.warning(
                    "dynamic_field_drop_index_failed",
                    collection=collection_name,
                    field=name,
                    error=str(e),
                )
            try:
                await self._repo.untrack(tracked[name])
            except Exception as e:
                log.warning(
                    "dynamic_field_untrack_failed",
                    collection=collection_name,
                    field=name,
                    error=str(e),
                )
                result.errors.append(SyncError(action="remove", field=name, error=str(e)))
                continue
            result.removed.append(name)

        log.info(
            "dynamic_fields_synced",
            collection=collection_name,
            added=len(result.added),
            removed=len(result.removed),
            errors=len(result.errors),
        )
        return result
