"""
Normalization of admin-supplied form field names into safe document keys.

The dynamic-field tracker keys and index names are built from these, so a
field configured as "Company Name" or "company-name" lands on
``company_name``.
"""

from __future__ import annotations

import re
from typing import Any, Optional

_SEPARATORS = re.compile(r"[\s-]+")
_INVALID = re.compile(r"[^a-z0-9_]")
_VALID_START = re.compile(r"^[a-z_]")


def safe_field_name(raw_name: Any) -> Optional[str]:
    """Normalize *raw_name* to ``[a-z_][a-z0-9_]*`` or return None.

    Examples:
        >>> safe_field_name("  My Field-Name! ")
        'my_field_name'
        >>> safe_field_name("123abc")
        'f_123abc'
        >>> safe_field_name("   ") is None
        True
    """
    if raw_name is None:
        return None
    s = str(raw_name).strip()
    if not s:
        return None
    s = _INVALID.sub("", _SEPARATORS.sub("_", s.lower()))
    if not s:
        return None
    if not _VALID_START.match(s):
        s = f"f_{s}"
    return s
