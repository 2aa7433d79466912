"""
Email OTP endpoints.

POST /api/otp/send         - issue a code to an email (rate limited)
POST /api/otp/verify       - check a code and report any existing registration
GET  /api/otp/check-email  - look up an email in a registration collection

Error responses come from the AppError handlers in errors.py.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from dependencies import get_otp_service
from schemas.dto.requests.otp import SendOtpRequest, VerifyOtpRequest
from services.otp_service import OtpService

router = APIRouter(prefix="/api/otp", tags=["otp"])


@router.post("/send")
async def send_otp(
    body: SendOtpRequest,
    otp_service: OtpService = Depends(get_otp_service),
) -> dict:
    result = await otp_service.send(
        channel=body.type,
        value=body.value,
        registration_type=body.registration_type,
        request_id=body.request_id,
    )
    return result.model_dump(by_alias=True, exclude_none=True)


@router.post("/verify")
async def verify_otp(
    body: VerifyOtpRequest,
    otp_service: OtpService = Depends(get_otp_service),
) -> dict:
    result = await otp_service.verify(
        value=body.value,
        otp=body.otp,
        registration_type=body.registration_type,
    )
    return result.model_dump(by_alias=True, exclude_none=True)


@router.get("/check-email")
async def check_email(
    email: Optional[str] = Query(default=None),
    type: Optional[str] = Query(default=None),
    otp_service: OtpService = Depends(get_otp_service),
) -> dict:
    result = await otp_service.check_email(email=email, registration_type=type)
    return result.model_dump(by_alias=True, exclude_none=True)
