"""
Read-only lookups against the registration collections.

Registrations are stored by older and newer form versions with the email in
different places, so the lookup matches any of the known paths, anchored and
case-insensitive. Errors propagate: the caller decides whether to fail open
or closed.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from schemas.dto.responses.otp import ExistingRegistration
from schemas.models.registration_type import RegistrationType

EMAIL_PATHS = (
    "email",
    "data.email",
    "form.email",
    "data.emailAddress",
    "data.contactEmail",
)

_PROJECTION = {
    "_id": 1,
    "ticket_code": 1,
    "name": 1,
    "mobile": 1,
    "email": 1,
    "data.name": 1,
    "data.mobile": 1,
}


def _email_query(email: str) -> dict:
    pattern = {"$regex": rf"^\s*{re.escape(email)}\s*$", "$options": "i"}
    return {"$or": [{path: pattern} for path in EMAIL_PATHS]}


def _str_or_none(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


class RegistrationRepository:
    def __init__(self, db) -> None:
        self._db = db

    async def find_existing_by_email(
        self, registration_type: RegistrationType, email: str
    ) -> Optional[ExistingRegistration]:
        if not email:
            return None
        col = self._db[registration_type.collection]
        doc = await col.find_one(_email_query(email), _PROJECTION)
        if doc is None:
            return None
        data = doc.get("data") if isinstance(doc.get("data"), dict) else {}
        return ExistingRegistration(
            id=_str_or_none(doc.get("_id")),
            ticket_code=_str_or_none(doc.get("ticket_code")),
            name=_str_or_none(doc.get("name") or data.get("name")),
            mobile=_str_or_none(doc.get("mobile") or data.get("mobile")),
        )
