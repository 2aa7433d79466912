"""
Admin registration page configs.

Saving a config canonicalizes its field list, stores it and then brings the
dynamic field indexes of the matching registration collection in line. The
sync step is advisory: its failure is logged and the save still succeeds.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError
from repositories.registration_config_repository import RegistrationConfigRepository
from schemas.dto.responses.registration_config import SaveConfigResponse
from schemas.models.registration_config import RegistrationConfig
from schemas.models.registration_type import RegistrationType, parse_registration_type
from services.field_sync_service import FieldSyncService
from shared.logging import get_logger

log = get_logger(__name__)


def resolve_registration_type(value: Optional[str]) -> RegistrationType:
    reg_type = parse_registration_type(value)
    if reg_type is None:
        raise ValidationError(
            f"Unknown registration type '{value}'",
            code="unknown_registration_type",
            field="registrationType",
        )
    return reg_type


class RegistrationConfigService:
    def __init__(
        self, repo: RegistrationConfigRepository, field_sync: FieldSyncService
    ) -> None:
        self._repo = repo
        self._field_sync = field_sync

    async def get(self, registration_type: str) -> dict:
        """Stored config for the type, or an empty canonical config."""
        reg_type = resolve_registration_type(registration_type)
        stored = await self._repo.get(reg_type.value)
        return RegistrationConfig.from_document(stored).to_document()

    async def save(self, registration_type: str, payload: Any) -> SaveConfigResponse:
        reg_type = resolve_registration_type(registration_type)
        if not isinstance(payload, dict):
            raise ValidationError("Config must be a JSON object", code="invalid_config")

        try:
            config = RegistrationConfig.from_document(payload).to_document()
        except PydanticValidationError as e:
            raise ValidationError(
                "Config could not be read",
                code="invalid_config",
                details=e.errors(include_url=False, include_context=False),
            ) from e
        await self._repo.upsert(reg_type.value, config)
        log.info(
            "registration_config_saved",
            registration_type=reg_type.value,
            fields=len(config["fields"]),
        )

        try:
            sync = await self._field_sync.sync(reg_type.collection, config["fields"])
        except Exception as e:
            log.error(
                "registration_config_sync_failed",
                registration_type=reg_type.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            sync = None

        return SaveConfigResponse(config=config, sync=sync)

    async def delete(self, registration_type: str) -> bool:
        reg_type = resolve_registration_type(registration_type)
        deleted = await self._repo.delete(reg_type.value)
        log.info(
            "registration_config_deleted",
            registration_type=reg_type.value,
            deleted=deleted,
        )
        return deleted
