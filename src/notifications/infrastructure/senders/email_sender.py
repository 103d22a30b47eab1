"""
SMTP email sender.

One process-wide instance, created on first use. Each message opens its own
SMTP connection in a worker thread so the event loop never blocks on I/O.
"""
from __future__ import annotations

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

from src.shared.config import Settings, get_settings
from src.shared.exceptions import ExternalServiceError
from src.shared.logging import get_logger

logger = get_logger(__name__)


class EmailSender:
    service = "email"

    def __init__(self, settings: Settings) -> None:
        self._host = settings.email_host
        self._port = settings.email_port
        self._user = settings.email_user
        self._password = settings.email_password
        self._from = settings.email_from or settings.email_user
        self._timeout = settings.notification_timeout_seconds
        self.configured = settings.email_configured

    def _build(self, to: str, subject: str, html: str, text: Optional[str]) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._from
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text or subject)
        message.add_alternative(html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            smtp.starttls()
            smtp.login(self._user, self._password)
            smtp.send_message(message)

    async def send(self, to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
        """
        Returns False when SMTP is not configured.

        Raises:
            ExternalServiceError: The SMTP exchange failed
        """
        if not self.configured:
            logger.warning("Email not configured, skipping", subject=subject)
            return False
        try:
            await asyncio.to_thread(self._deliver, self._build(to, subject, html, text))
        except (smtplib.SMTPException, OSError) as exc:
            raise ExternalServiceError(self.service, f"Email delivery failed: {exc}") from exc
        logger.info("Email sent", to=to, subject=subject)
        return True


_sender: Optional[EmailSender] = None


def get_email_sender() -> EmailSender:
    global _sender
    if _sender is None:
        _sender = EmailSender(get_settings())
    return _sender
