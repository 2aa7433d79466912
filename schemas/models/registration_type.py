"""
Closed set of registration categories and their backing collections.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class RegistrationType(str, Enum):
    VISITOR = "visitor"
    EXHIBITOR = "exhibitor"
    SPEAKER = "speaker"
    PARTNER = "partner"
    AWARDEE = "awardee"

    @property
    def collection(self) -> str:
        return _COLLECTIONS[self]


_COLLECTIONS = {
    RegistrationType.VISITOR: "visitors",
    RegistrationType.EXHIBITOR: "exhibitors",
    RegistrationType.SPEAKER: "speakers",
    RegistrationType.PARTNER: "partners",
    RegistrationType.AWARDEE: "awardees",
}


def parse_registration_type(value: Any) -> Optional[RegistrationType]:
    """Map ``"Visitor"``, ``"visitors"``, ``" speaker "`` etc. to a member.

    Returns None for anything outside the closed set.
    """
    if not isinstance(value, str):
        return None
    s = value.strip().lower()
    if not s:
        return None
    if s.endswith("s"):
        s = s[:-1]
    try:
        return RegistrationType(s)
    except ValueError:
        return None
