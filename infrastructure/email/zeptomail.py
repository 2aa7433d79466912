"""ZeptoMail implementation of EmailProvider.

Every attempt is recorded in the `mail_logs` collection when a MailLogRepository
is supplied: a ``pending`` entry before sending, flipped to ``sent`` or
``failed`` afterwards. Mail-log failures are logged and never block delivery.
"""

from typing import Optional

from config import EmailSettings
from infrastructure.email.protocol import MailMessage, MailResult
from infrastructure.http_client import HttpClient
from repositories.mail_log_repository import MailLogRepository
from shared.logging import get_logger, mask_email

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.in/v1.1/email"


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        mail_logs: Optional[MailLogRepository] = None,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._mail_logs = mail_logs

    def _payload(self, message: MailMessage) -> dict:
        payload: dict = {
            "from": {
                "address": self._settings.mail_from,
                "name": self._settings.mail_from_name,
            },
            "to": [{"email_address": {"address": message.to, "name": message.to}}],
            "subject": message.subject or "(no subject)",
        }
        if message.html:
            payload["htmlbody"] = message.html
        if message.text:
            payload["textbody"] = message.text
        reply_to = message.reply_to or self._settings.mail_reply_to
        if reply_to:
            payload["reply_to"] = [{"address": reply_to}]
        return payload

    def _auth_header(self) -> str:
        token = self._settings.zepto_api_token
        if not token.startswith("Zoho-enczapikey "):
            token = f"Zoho-enczapikey {token}"
        return token

    async def send_mail(self, message: MailMessage) -> MailResult:
        if not message.to:
            return MailResult(success=False, error="Missing `to` address")
        if not self._settings.zepto_api_token:
            log.error("mail_send_failed", reason="token_not_configured")
            return MailResult(success=False, error="mail provider not configured")

        log_id = None
        if self._mail_logs is not None:
            log_id = await self._mail_logs.record_pending(message)

        headers = {"Authorization": self._auth_header(), "Content-Type": "application/json"}
        try:
            response = await self._http.post_with_retry(
                _ZEPTO_API_URL, json=self._payload(message), headers=headers
            )
        except Exception as e:
            log.error(
                "mail_send_error",
                to_email=mask_email(message.to),
                subject=message.subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            result = MailResult(success=False, error=str(e))
        else:
            if response.status_code in (200, 201, 202):
                log.info(
                    "mail_sent_success",
                    to_email=mask_email(message.to),
                    subject=message.subject,
                )
                result = MailResult(success=True, info={"status_code": response.status_code})
            else:
                log.error(
                    "mail_sent_failed",
                    to_email=mask_email(message.to),
                    subject=message.subject,
                    status_code=response.status_code,
                    response=response.text[:200],
                )
                result = MailResult(
                    success=False,
                    error=f"provider returned {response.status_code}",
                    info={"status_code": response.status_code},
                )

        if self._mail_logs is not None and log_id is not None:
            await self._mail_logs.record_result(log_id, result)
        return result
