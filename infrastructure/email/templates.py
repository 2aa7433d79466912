"""Jinja2 rendering of transactional email bodies."""

import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from infrastructure.email.protocol import MailMessage

_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


class EmailTemplates:
    def __init__(
        self,
        event_name: str = "RailTrans Expo",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self.event_name = event_name
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def otp_message(self, to: str, otp_code: str, ttl_seconds: int) -> MailMessage:
        minutes = max(1, ttl_seconds // 60)
        html = self._jinja.get_template("otp.html").render(
            otp_code=otp_code, minutes=minutes, event_name=self.event_name
        )
        text = f"Your OTP is {otp_code}. It expires in {minutes} minutes."
        return MailMessage(
            to=to,
            subject=f"Your {self.event_name} OTP",
            text=text,
            html=html,
            log_body=False,
        )
