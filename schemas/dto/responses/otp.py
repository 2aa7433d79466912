"""
Response DTOs for OTP endpoints.

ExistingRegistration - summary of an already-registered email
SendOtpResponse      - POST /api/otp/send (200)
VerifyOtpResponse    - POST /api/otp/verify (200, success true or false)
CheckEmailResponse   - GET /api/otp/check-email (200)

Route handlers serialise with ``by_alias=True, exclude_none=True`` so the JSON
keys are camelCase and optional keys are absent rather than null.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ExistingRegistration(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    ticket_code: Optional[str] = None
    name: Optional[str] = None
    mobile: Optional[str] = None


class SendOtpResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    email: str
    registration_type: str = Field(alias="registrationType")
    expires_in_sec: int = Field(alias="expiresInSec")
    resend_cooldown_sec: int = Field(alias="resendCooldownSec")
    otp_sent: bool = Field(default=True, alias="otpSent")
    idempotent: Optional[bool] = None


class VerifyOtpResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    email: Optional[str] = None
    registration_type: Optional[str] = Field(default=None, alias="registrationType")
    existing: Optional[ExistingRegistration] = None
    error: Optional[str] = None


class CheckEmailResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    found: bool
    info: Optional[ExistingRegistration] = None
