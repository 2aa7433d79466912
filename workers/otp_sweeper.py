"""
Background purge of expired OTP records.

Started as an asyncio task by the app lifespan and cancelled on shutdown.
A failed pass is logged and the loop carries on at the next interval.
"""

from __future__ import annotations

import asyncio

from services.otp_service import OtpService
from shared.logging import get_logger

log = get_logger(__name__)


async def run_otp_sweeper(otp_service: OtpService, interval_seconds: float) -> None:
    log.info("otp_sweeper_started", interval_seconds=interval_seconds)
    try:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await otp_service.sweep_expired()
            except Exception as e:
                log.error("otp_sweep_failed", error=str(e), error_type=type(e).__name__)
    except asyncio.CancelledError:
        log.info("otp_sweeper_stopped")
        raise
