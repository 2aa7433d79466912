"""Async Redis connection factory.

Redis only backs the shared OTP store. ``create_redis_client`` returns None
when the server cannot be reached, and the app falls back to the in-process
store.
"""

from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from shared.logging import get_logger

log = get_logger(__name__)


def _display_uri(redis_uri: str) -> str:
    return redis_uri.split("@")[-1]


async def create_redis_client(
    redis_uri: str, socket_timeout: float = 5.0
) -> Optional[aioredis.Redis]:
    client: aioredis.Redis = aioredis.from_url(
        redis_uri,
        decode_responses=True,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
    )
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        log.warning(
            "redis_connection_failed",
            uri=_display_uri(redis_uri),
            error=str(e),
            error_type=type(e).__name__,
        )
        await client.aclose()
        return None
    log.info("redis_connected", uri=_display_uri(redis_uri))
    return client
