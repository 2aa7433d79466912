"""
Random code generators - pure, side-effect-free functions.

All generators use the ``secrets`` module so codes cannot be predicted from
earlier outputs.
"""

from __future__ import annotations

import secrets

OTP_MIN = 100000
OTP_MAX = 999999


def generate_otp_code() -> str:
    """Generate a uniformly random 6-digit OTP in ``100000..999999``."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))

