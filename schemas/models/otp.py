"""
OTP record held by the OTP store, keyed by normalized email.

All timestamps are epoch seconds. The record is plain data: the store keeps
it in memory or serialises it to JSON (Redis), never to MongoDB.

code            - 6-digit numeric string
expires_at      - record is invalid at/after this instant
attempts        - failed verifications since issuance
last_sent_at    - when the current code was mailed
cooldown_until  - no resend before this instant
window_start    - start of the hourly send-quota window
send_count      - sends inside the current window
last_request_id - idempotency token of the most recent send
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class OtpRecord:
    code: str
    expires_at: float
    attempts: int
    last_sent_at: float
    cooldown_until: float
    window_start: float
    send_count: int
    last_request_id: Optional[str] = None
    registration_type: Optional[str] = None

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def with_failed_attempt(self) -> "OtpRecord":
        return replace(self, attempts=self.attempts + 1)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "OtpRecord":
        return cls(**data)
