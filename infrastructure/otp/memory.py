"""In-process OTP store.

A plain dict keyed by normalized email. Every method completes without
awaiting anything, so each mutation is atomic with respect to the event loop.
State is per process: with several workers, configure Redis instead.
"""

from typing import Optional

from schemas.models.otp import OtpRecord


class InMemoryOtpStore:
    def __init__(self) -> None:
        self._records: dict[str, OtpRecord] = {}

    async def get(self, email: str) -> Optional[OtpRecord]:
        return self._records.get(email)

    async def set(self, email: str, record: OtpRecord) -> None:
        self._records[email] = record

    async def delete(self, email: str) -> None:
        self._records.pop(email, None)

    async def replace_if_same(
        self, email: str, expected: Optional[OtpRecord], replacement: OtpRecord
    ) -> bool:
        if self._records.get(email) is not expected:
            return False
        self._records[email] = replacement
        return True

    async def delete_if_same(self, email: str, record: OtpRecord) -> bool:
        if self._records.get(email) is record:
            del self._records[email]
            return True
        return False

    async def sweep(self, now: float) -> int:
        expired = [k for k, r in self._records.items() if r.is_expired(now)]
        for k in expired:
            del self._records[k]
        return len(expired)

    def __len__(self) -> int:
        return len(self._records)
