"""
Registration page configuration models.

Maps to the `registration_configs` MongoDB collection, one document per
registration type (``page``). Only the field list matters to the backend;
every other key an admin UI stores (images, event details, terms, ...) is kept
as-is.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

REGISTRATION_CONFIGS_COLLECTION = "registration_configs"


class FormField(BaseModel):
    """A single admin-configured form control."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = ""
    label: str = ""
    type: str = "text"
    required: bool = False
    visible: bool = True
    options: list[str] = Field(default_factory=list)
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name", "label", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> str:
        return str(v or "").strip()

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, v: Any) -> str:
        return str(v or "").strip() or "text"

    @field_validator("required", mode="before")
    @classmethod
    def _truthy_required(cls, v: Any) -> bool:
        return bool(v)

    @field_validator("visible", mode="before")
    @classmethod
    def _visible_default(cls, v: Any) -> bool:
        return v if isinstance(v, bool) else True

    @field_validator("options", mode="before")
    @classmethod
    def _stringify_options(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        return ["" if o is None else str(o) for o in v]

    @field_validator("meta", mode="before")
    @classmethod
    def _meta_dict(cls, v: Any) -> dict:
        return v if isinstance(v, dict) else {}


class RegistrationConfig(BaseModel):
    """Canonical config shape: nameless fields are dropped, labels default to names."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    fields: list[FormField] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    event_details: dict[str, Any] = Field(default_factory=dict, alias="eventDetails")

    @field_validator("fields", mode="before")
    @classmethod
    def _only_dict_fields(cls, v: Any) -> list:
        if not isinstance(v, list):
            return []
        return [f for f in v if isinstance(f, dict)]

    @field_validator("fields", mode="after")
    @classmethod
    def _drop_nameless(cls, v: list[FormField]) -> list[FormField]:
        kept = []
        for f in v:
            if not f.name:
                continue
            if not f.label:
                f.label = f.name
            kept.append(f)
        return kept

    @field_validator("images", mode="before")
    @classmethod
    def _images_list(cls, v: Any) -> list[str]:
        if isinstance(v, list):
            return ["" if i is None else str(i) for i in v]
        return [str(v)] if v else []

    @field_validator("event_details", mode="before")
    @classmethod
    def _details_dict(cls, v: Any) -> dict:
        return v if isinstance(v, dict) else {}

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, data: Optional[dict]) -> "RegistrationConfig":
        return cls.model_validate(data or {})
