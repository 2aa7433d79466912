"""
Response DTOs for registration config endpoints.

SyncError          - one best-effort failure recorded during a field sync
SyncResult         - outcome of FieldSyncService.sync()
SaveConfigResponse - POST /api/registration-config/{type}
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class SyncError(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: str  # "createIndex" | "trackAdd" | "remove"
    field: str
    error: str


class SyncResult(BaseModel):
    """Advisory: a non-empty ``errors`` list does not mean nothing was applied."""

    model_config = ConfigDict(populate_by_name=True)

    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    errors: list[SyncError] = Field(default_factory=list)


class SaveConfigResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    config: dict[str, Any]
    sync: Optional[SyncResult] = None
