"""Audit trail of outgoing mail in the `mail_logs` collection.

Write failures here are logged and swallowed. Bodies of messages sent with
``log_body=False`` are not stored.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from infrastructure.email.protocol import MailMessage, MailResult
from shared.logging import get_logger

log = get_logger(__name__)

MAIL_LOGS_COLLECTION = "mail_logs"


class MailLogRepository:
    def __init__(self, db) -> None:
        self._col = db[MAIL_LOGS_COLLECTION]

    async def record_pending(self, message: MailMessage) -> Optional[Any]:
        now = datetime.now(timezone.utc)
        entry = {
            "to": [message.to],
            "subject": message.subject,
            "text": message.text if message.log_body else None,
            "html": message.html if message.log_body else None,
            "bodyRedacted": not message.log_body,
            "status": "pending",
            "sendResult": None,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            result = await self._col.insert_one(entry)
            return result.inserted_id
        except Exception as e:
            log.warning("mail_log_insert_failed", error=str(e), error_type=type(e).__name__)
            return None

    async def record_result(self, log_id: Any, result: MailResult) -> None:
        update = {
            "status": "sent" if result.success else "failed",
            "sendResult": result.info if result.success else {"error": result.error},
            "updatedAt": datetime.now(timezone.utc),
        }
        try:
            await self._col.update_one({"_id": log_id}, {"$set": update})
        except Exception as e:
            log.warning("mail_log_update_failed", error=str(e), error_type=type(e).__name__)
