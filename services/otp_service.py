"""
Email OTP gatekeeper.

Issues and verifies one-time codes that prove ownership of an email address
before registration. Per normalized email the state machine is

    NONE -> PENDING -> (VERIFIED | EXPIRED | EXHAUSTED)

with PENDING re-entrant on resend. ``send`` is guarded by a duplicate
registration check, an idempotent-replay window, a resend cooldown and an
hourly send quota; ``verify`` consumes the code and reports whether the
address already belongs to a registration.

Registration lookup failures fail open in ``send`` and ``check_email`` and
fail closed in ``verify``.
"""

from __future__ import annotations

import math
import time
from typing import Callable, Optional

from config import OtpSettings
from errors import ConflictError, RateLimitError, ServiceError, ValidationError
from infrastructure.email.protocol import EmailProvider
from infrastructure.email.templates import EmailTemplates
from infrastructure.otp.protocol import OtpStore
from repositories.registration_repository import RegistrationRepository
from schemas.dto.responses.otp import (
    CheckEmailResponse,
    ExistingRegistration,
    SendOtpResponse,
    VerifyOtpResponse,
)
from schemas.models.otp import OtpRecord
from schemas.models.registration_type import RegistrationType, parse_registration_type
from shared.generators import generate_otp_code
from shared.logging import get_logger, mask_email
from shared.validators import is_valid_email, normalize_email

log = get_logger(__name__)

OTP_LENGTH = 6
# read-decide-write rounds before a contended send gives up
_STORE_RETRIES = 3

ERR_NOT_FOUND = "OTP not found or expired"
ERR_EXPIRED = "OTP expired"
ERR_INCORRECT = "Incorrect OTP"


def _require_email(value: Optional[str]) -> str:
    if not is_valid_email(value):
        raise ValidationError("Provide a valid email", code="invalid_email", field="value")
    return normalize_email(value)


def _require_registration_type(value: Optional[str]) -> RegistrationType:
    if not value or not isinstance(value, str) or not value.strip():
        raise ValidationError(
            "registrationType required",
            code="missing_registration_type",
            field="registrationType",
        )
    reg_type = parse_registration_type(value)
    if reg_type is None:
        raise ValidationError(
            f"Unknown registrationType '{value}'",
            code="unknown_registration_type",
            field="registrationType",
        )
    return reg_type


class OtpService:
    def __init__(
        self,
        store: OtpStore,
        registrations: RegistrationRepository,
        email_provider: EmailProvider,
        templates: EmailTemplates,
        settings: Optional[OtpSettings] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._registrations = registrations
        self._email = email_provider
        self._templates = templates
        self._settings = settings or OtpSettings()
        self._clock = clock

    # ── helpers ──────────────────────────────────────────────────────────────

    async def _lookup_fail_open(
        self, reg_type: RegistrationType, email: str
    ) -> Optional[ExistingRegistration]:
        try:
            return await self._registrations.find_existing_by_email(reg_type, email)
        except Exception as e:
            log.warning(
                "registration_lookup_failed_open",
                registration_type=reg_type.value,
                email=mask_email(email),
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    def _send_response(
        self, email: str, reg_type: RegistrationType, idempotent: Optional[bool] = None
    ) -> SendOtpResponse:
        return SendOtpResponse(
            email=email,
            registrationType=reg_type.value,
            expiresInSec=self._settings.otp_ttl_seconds,
            resendCooldownSec=self._settings.otp_resend_cooldown_seconds,
            idempotent=idempotent,
        )

    def _next_record(
        self,
        email: str,
        record: Optional[OtpRecord],
        reg_type: RegistrationType,
        request_id: Optional[str],
        now: float,
    ) -> Optional[OtpRecord]:
        """Return the record a send should store, or None for an idempotent replay."""
        s = self._settings
        if record is not None:
            if (
                request_id
                and record.last_request_id == request_id
                and now - record.last_sent_at < s.otp_idempotency_window_seconds
            ):
                return None

            if now < record.cooldown_until:
                wait = math.ceil(record.cooldown_until - now)
                log.info("otp_send_cooldown", email=mask_email(email), retry_after=wait)
                raise RateLimitError(
                    f"Please wait {wait} seconds before requesting another OTP",
                    code="otp_cooldown",
                    retry_after=wait,
                )

        window_start, send_count = now, 0
        if record is not None and now - record.window_start <= s.otp_send_window_seconds:
            window_start, send_count = record.window_start, record.send_count
        if send_count >= s.otp_max_sends_per_window:
            wait = max(1, math.ceil(window_start + s.otp_send_window_seconds - now))
            log.warning("otp_send_quota_exceeded", email=mask_email(email), count=send_count)
            raise RateLimitError(
                "Too many OTP requests. Please try again later.",
                code="otp_quota_exceeded",
                retry_after=wait,
            )

        return OtpRecord(
            code=generate_otp_code(),
            expires_at=now + s.otp_ttl_seconds,
            attempts=0,
            last_sent_at=now,
            cooldown_until=now + s.otp_resend_cooldown_seconds,
            window_start=window_start,
            send_count=send_count + 1,
            last_request_id=request_id,
            registration_type=reg_type.value,
        )

    async def _count_failed_attempt(self, email: str, record: OtpRecord) -> None:
        # concurrent wrong guesses each count; a resent code keeps its fresh budget
        while not await self._store.replace_if_same(
            email, record, record.with_failed_attempt()
        ):
            current = await self._store.get(email)
            if current is None or current.last_sent_at != record.last_sent_at:
                return
            record = current

    # ── send ─────────────────────────────────────────────────────────────────

    async def send(
        self,
        *,
        channel: str = "email",
        value: Optional[str],
        registration_type: Optional[str],
        request_id: Optional[str] = None,
    ) -> SendOtpResponse:
        if channel != "email":
            raise ValidationError("Only email OTPs are supported", code="invalid_email", field="type")
        email = _require_email(value)
        reg_type = _require_registration_type(registration_type)

        existing = await self._lookup_fail_open(reg_type, email)
        if existing is not None:
            log.info(
                "otp_send_blocked_existing",
                registration_type=reg_type.value,
                email=mask_email(email),
                registration_id=existing.id,
            )
            raise ConflictError(
                "Email already exists",
                code="already_registered",
                extra={"existing": existing.model_dump(exclude_none=True), "registrationType": reg_type.value},
            )

        s = self._settings
        now = self._clock()
        for _ in range(_STORE_RETRIES):
            record = await self._store.get(email)
            new_record = self._next_record(email, record, reg_type, request_id, now)
            if new_record is None:
                log.info("otp_send_idempotent_replay", email=mask_email(email))
                return self._send_response(email, reg_type, idempotent=True)
            if await self._store.replace_if_same(email, record, new_record):
                break
        else:
            log.warning("otp_send_contended", email=mask_email(email))
            raise RateLimitError(
                "Another OTP request is in progress. Please retry shortly.",
                code="otp_cooldown",
                retry_after=1,
            )

        message = self._templates.otp_message(email, new_record.code, s.otp_ttl_seconds)
        try:
            result = await self._email.send_mail(message)
            failure = None if result.success else (result.error or "mail provider refused")
        except Exception as e:
            failure = f"{type(e).__name__}: {e}"

        if failure is not None:
            await self._store.delete_if_same(email, new_record)
            log.error("otp_send_mail_failed", email=mask_email(email), error=failure)
            raise ServiceError("Failed to send OTP", code="otp_send_failed")

        log.info(
            "otp_sent",
            email=mask_email(email),
            registration_type=reg_type.value,
            send_count=new_record.send_count,
        )
        return self._send_response(email, reg_type)

    # ── verify ───────────────────────────────────────────────────────────────

    async def verify(
        self,
        *,
        value: Optional[str],
        otp: Optional[str],
        registration_type: Optional[str],
    ) -> VerifyOtpResponse:
        email = _require_email(value)
        reg_type = _require_registration_type(registration_type)

        record = await self._store.get(email)
        if record is None:
            return VerifyOtpResponse(success=False, error=ERR_NOT_FOUND)

        if record.is_expired(self._clock()):
            await self._store.delete_if_same(email, record)
            log.info("otp_verify_expired", email=mask_email(email))
            return VerifyOtpResponse(success=False, error=ERR_EXPIRED)

        if record.attempts >= self._settings.otp_max_verify_attempts:
            await self._store.delete_if_same(email, record)
            log.warning("otp_verify_attempts_exhausted", email=mask_email(email))
            raise RateLimitError(
                "Too many incorrect attempts. Please request a new OTP.",
                code="otp_attempts_exceeded",
            )

        candidate = str(otp or "").strip()
        if len(candidate) != OTP_LENGTH or candidate != record.code:
            await self._count_failed_attempt(email, record)
            log.info(
                "otp_verify_incorrect", email=mask_email(email), attempts=record.attempts + 1
            )
            return VerifyOtpResponse(success=False, error=ERR_INCORRECT)

        if not await self._store.delete_if_same(email, record):
            log.info("otp_verify_superseded", email=mask_email(email))
            return VerifyOtpResponse(success=False, error=ERR_NOT_FOUND)
        log.info("otp_verified", email=mask_email(email), registration_type=reg_type.value)

        try:
            existing = await self._registrations.find_existing_by_email(reg_type, email)
        except Exception as e:
            log.error(
                "otp_verify_lookup_failed",
                email=mask_email(email),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ServiceError("Server error during verification") from e

        return VerifyOtpResponse(
            success=True,
            email=email,
            registrationType=reg_type.value,
            existing=existing,
        )

    # ── check-email ──────────────────────────────────────────────────────────

    async def check_email(
        self, *, email: Optional[str], registration_type: Optional[str]
    ) -> CheckEmailResponse:
        normalized = _require_email(email)
        reg_type = _require_registration_type(registration_type)
        existing = await self._lookup_fail_open(reg_type, normalized)
        return CheckEmailResponse(found=existing is not None, info=existing)

    # ── maintenance ──────────────────────────────────────────────────────────

    async def sweep_expired(self) -> int:
        removed = await self._store.sweep(self._clock())
        if removed:
            log.info("otp_sweep", removed=removed)
        return removed
