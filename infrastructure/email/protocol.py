"""EmailProvider protocol - services depend on this, not the concrete implementation."""

from dataclasses import dataclass, field
from typing import Optional, Protocol


@dataclass
class MailMessage:
    to: str
    subject: str
    text: Optional[str] = None
    html: Optional[str] = None
    reply_to: Optional[str] = None
    # False keeps the body (e.g. a one-time code) out of the mail log
    log_body: bool = True


@dataclass
class MailResult:
    success: bool
    error: Optional[str] = None
    info: dict = field(default_factory=dict)


class EmailProvider(Protocol):
    async def send_mail(self, message: MailMessage) -> MailResult: ...
