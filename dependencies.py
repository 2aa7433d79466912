"""
FastAPI dependency providers.

Everything here reads from ``app.state``, which the lifespan in app.py fills.
Tests swap collaborators by building an app whose lifespan sets the same
attributes.
"""

from __future__ import annotations

from fastapi import Request

from services.otp_service import OtpService
from services.registration_config_service import RegistrationConfigService


async def get_otp_service(request: Request) -> OtpService:
    """Return the OtpService built at startup."""
    return request.app.state.otp_service


async def get_registration_config_service(request: Request) -> RegistrationConfigService:
    return request.app.state.registration_config_service
