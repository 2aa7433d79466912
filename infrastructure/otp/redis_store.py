"""Redis-backed OTP store.

Shares OTP state and rate-limit counters between processes. Records are
stored as JSON (not pickle) under ``otp:<email>``. The key TTL reaches the end
of the quota window, but expired codes are removed by ``sweep`` and ``verify``
exactly as in the in-memory store; the TTL only bounds keys nobody sweeps.

Conditional writes run as one Lua script so the comparison and the write
cannot interleave with another process.
"""

import json
import math
import time
from typing import Callable, Optional

import redis.asyncio as aioredis

from schemas.models.otp import OtpRecord
from shared.logging import get_logger

log = get_logger(__name__)

_KEY_PREFIX = "otp:"

# KEYS[1] = otp key; ARGV[1] = expected JSON ("" = absent);
# ARGV[2] = replacement JSON ("" = delete); ARGV[3] = ttl seconds
_COMPARE_AND_SET = """
local current = redis.call('GET', KEYS[1])
if ARGV[1] == '' then
    if current then return 0 end
elseif current ~= ARGV[1] then
    return 0
end
if ARGV[2] == '' then
    redis.call('DEL', KEYS[1])
else
    redis.call('SET', KEYS[1], ARGV[2], 'EX', tonumber(ARGV[3]))
end
return 1
"""


def _dump(record: Optional[OtpRecord]) -> str:
    return "" if record is None else json.dumps(record.to_dict())


class RedisOtpStore:
    def __init__(
        self,
        redis_client: aioredis.Redis,
        window_seconds: int = 3600,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._redis = redis_client
        self._window_seconds = window_seconds
        self._clock = clock or time.time
        self._compare_and_set = redis_client.register_script(_COMPARE_AND_SET)

    def _key(self, email: str) -> str:
        return f"{_KEY_PREFIX}{email}"

    def _ttl(self, record: OtpRecord) -> int:
        keep_until = max(record.expires_at, record.window_start + self._window_seconds)
        return max(1, math.ceil(keep_until - self._clock()))

    async def get(self, email: str) -> Optional[OtpRecord]:
        raw = await self._redis.get(self._key(email))
        if raw is None:
            return None
        return OtpRecord.from_dict(json.loads(raw))

    async def set(self, email: str, record: OtpRecord) -> None:
        await self._redis.set(self._key(email), _dump(record), ex=self._ttl(record))

    async def delete(self, email: str) -> None:
        await self._redis.delete(self._key(email))

    async def replace_if_same(
        self, email: str, expected: Optional[OtpRecord], replacement: OtpRecord
    ) -> bool:
        swapped = await self._compare_and_set(
            keys=[self._key(email)],
            args=[_dump(expected), _dump(replacement), self._ttl(replacement)],
        )
        return bool(swapped)

    async def delete_if_same(self, email: str, record: OtpRecord) -> bool:
        deleted = await self._compare_and_set(
            keys=[self._key(email)], args=[_dump(record), "", 0]
        )
        return bool(deleted)

    async def sweep(self, now: float) -> int:
        removed = 0
        async for key in self._redis.scan_iter(match=f"{_KEY_PREFIX}*"):
            raw = await self._redis.get(key)
            if raw is None:
                continue
            try:
                record = OtpRecord.from_dict(json.loads(raw))
            except (ValueError, TypeError) as e:
                log.warning("otp_store_corrupt_record", key=key, error=str(e))
            else:
                if not record.is_expired(now):
                    continue
            if await self._compare_and_set(keys=[key], args=[raw, "", 0]):
                removed += 1
        return removed
