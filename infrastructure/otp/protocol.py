"""OtpStore protocol - OtpService depends on this, not on a concrete store.

``replace_if_same`` and ``delete_if_same`` only act when the stored record is
still the one the caller read (``None`` meaning "no record"), so a concurrent
resend or verify is never overwritten.
"""

from typing import Optional, Protocol

from schemas.models.otp import OtpRecord


class OtpStore(Protocol):
    async def get(self, email: str) -> Optional[OtpRecord]: ...

    async def set(self, email: str, record: OtpRecord) -> None: ...

    async def delete(self, email: str) -> None: ...

    async def replace_if_same(
        self, email: str, expected: Optional[OtpRecord], replacement: OtpRecord
    ) -> bool: ...

    async def delete_if_same(self, email: str, record: OtpRecord) -> bool: ...

    async def sweep(self, now: float) -> int: ...
