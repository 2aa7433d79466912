"""
Admin registration page config endpoints.

GET    /api/registration-config/{registration_type}
POST   /api/registration-config/{registration_type}  - save + dynamic field sync
DELETE /api/registration-config/{registration_type}
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from dependencies import get_registration_config_service
from services.registration_config_service import RegistrationConfigService

router = APIRouter(prefix="/api/registration-config", tags=["registration-config"])


@router.get("/{registration_type}")
async def get_registration_config(
    registration_type: str,
    service: RegistrationConfigService = Depends(get_registration_config_service),
) -> dict:
    config = await service.get(registration_type)
    return {"success": True, "config": config}


@router.post("/{registration_type}")
async def save_registration_config(
    registration_type: str,
    payload: Any = Body(default=None),
    service: RegistrationConfigService = Depends(get_registration_config_service),
) -> dict:
    result = await service.save(registration_type, payload)
    return result.model_dump(by_alias=True)


@router.delete("/{registration_type}")
async def delete_registration_config(
    registration_type: str,
    service: RegistrationConfigService = Depends(get_registration_config_service),
) -> dict:
    deleted = await service.delete(registration_type)
    return {"success": True, "deleted": deleted}
