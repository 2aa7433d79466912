"""
Base model for MongoDB document models.

PyObjectId lets Pydantic v2 validate and serialise BSON ObjectIds.
MongoBaseModel converts between model instances and raw pymongo dicts.
"""

from __future__ import annotations

from typing import Any, Optional, Type, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler
from pydantic_core import core_schema

M = TypeVar("M", bound="MongoBaseModel")


class PyObjectId(ObjectId):
    """BSON ObjectId accepted from an ObjectId or its 24-char hex string."""

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.to_string_ser_schema(),
        )

    @classmethod
    def _validate(cls, v: Any) -> ObjectId:
        if isinstance(v, ObjectId):
            return v
        if isinstance(v, str) and ObjectId.is_valid(v):
            return ObjectId(v)
        raise ValueError(f"Invalid ObjectId: {v!r}")


class MongoBaseModel(BaseModel):
    """
    Base for document models stored in MongoDB.

    The document ``_id`` lives on ``id``; field aliases carry the camelCase
    keys used in the stored documents.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    def to_mongo(self) -> dict:
        """Aliased dict for insert/update; a None ``_id`` is left out."""
        data = self.model_dump(by_alias=True)
        if data.get("_id") is None:
            data.pop("_id", None)
        return data

    @classmethod
    def from_mongo(cls: Type[M], data: Optional[dict]) -> Optional[M]:
        if data is None:
            return None
        return cls.model_validate(data)
