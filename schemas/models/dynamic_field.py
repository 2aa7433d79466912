"""
Dynamic field tracking document model.

Maps to the `dynamic_fields` MongoDB collection. One document per
(collectionName, fieldName) pair marks a normalized field name as active for a
registration collection; the set of documents for a collection is the record
of which `dyn_<field>_idx` sparse indexes should exist on it.

Documents are created or deleted, never updated in place.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from schemas.models.base import MongoBaseModel

DYNAMIC_FIELDS_COLLECTION = "dynamic_fields"


def dynamic_index_name(field_name: str) -> str:
    """Deterministic index name so the index can be found and dropped later."""
    return f"dyn_{field_name}_idx"


class DynamicFieldDoc(MongoBaseModel):
    """Document model for the `dynamic_fields` collection."""

    collection_name: str = Field(alias="collectionName")
    field_name: str = Field(alias="fieldName")
    orig_name: str = Field(alias="origName")
    field_type: str = Field(default="text", alias="fieldType")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
