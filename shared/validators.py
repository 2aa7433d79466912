"""
Input validators - framework-agnostic, pure functions.
"""

from __future__ import annotations

import re
from typing import Any

_EMAIL_SHAPE = re.compile(r"\S+@\S+\.\S+")


def is_valid_email(value: Any) -> bool:
    """Return True if *value* is a string with a basic ``x@y.z`` shape."""
    return isinstance(value, str) and bool(_EMAIL_SHAPE.search(value))


def normalize_email(value: Any) -> str:
    """Trim and lowercase an email address; ``None`` becomes ``""``."""
    return str(value or "").strip().lower()
