"""
Health check endpoint.

GET /health reports MongoDB, Redis and the active OTP store.
- MongoDB unreachable: "unhealthy", 503.
- Redis configured but unreachable: "degraded", 200.
- Redis not configured: reported as such; OTPs are held in memory.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)

router = APIRouter(tags=["health"])


async def _ping_mongo(db: Any) -> str:
    try:
        await db.client.admin.command("ping")
    except Exception as e:
        log.warning("health_mongo_failed", error=str(e), error_type=type(e).__name__)
        return "error"
    return "ok"


async def _ping_redis(redis: Any) -> str:
    if redis is None:
        return "not_configured"
    try:
        await redis.ping()
    except Exception as e:
        log.warning("health_redis_failed", error=str(e), error_type=type(e).__name__)
        return "error"
    return "ok"


@router.get("/health")
async def health_check(request: Request) -> JSONResponse:
    state = request.app.state
    checks = {
        "mongodb": await _ping_mongo(state.db),
        "redis": await _ping_redis(getattr(state, "redis", None)),
    }
    otp_store = getattr(state, "otp_store", None)
    if otp_store is not None:
        checks["otp_store"] = type(otp_store).__name__

    if checks["mongodb"] != "ok":
        overall, status_code = "unhealthy", 503
    elif checks["redis"] == "error":
        overall, status_code = "degraded", 200
    else:
        overall, status_code = "healthy", 200

    return JSONResponse(
        status_code=status_code,
        content={"status": overall, "checks": checks},
    )
