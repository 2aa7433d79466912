"""
Request DTOs for OTP endpoints.

SendOtpRequest    - POST /api/otp/send
VerifyOtpRequest  - POST /api/otp/verify

Fields are plain optional strings; shape checks live in OtpService, which
reports a bad email as 400 ``invalid_email``. Numbers are coerced to strings.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_str(v: Any) -> Optional[str]:
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return None


class SendOtpRequest(BaseModel):
    """Request body for POST /api/otp/send."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = "email"
    value: Optional[str] = None
    request_id: Optional[str] = Field(default=None, alias="requestId")
    registration_type: Optional[str] = Field(default=None, alias="registrationType")

    @field_validator("value", "request_id", "registration_type", mode="before")
    @classmethod
    def _coerce(cls, v: Any) -> Optional[str]:
        return _as_str(v)


class VerifyOtpRequest(BaseModel):
    """Request body for POST /api/otp/verify.

    ``otp`` is the 6-digit code mailed by /send.
    """

    model_config = ConfigDict(populate_by_name=True)

    value: Optional[str] = None
    otp: Optional[str] = None
    registration_type: Optional[str] = Field(default=None, alias="registrationType")

    @field_validator("value", "otp", "registration_type", mode="before")
    @classmethod
    def _coerce(cls, v: Any) -> Optional[str]:
        return _as_str(v)
