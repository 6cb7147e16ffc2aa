"""Email providers: SMTP, SendGrid and a log-only mock.

Every real backend sends a plaintext part plus a simple HTML rendition
of the same body.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from app.core.notifications.models import EmailContent, Priority
from app.core.notifications.normalize import mask_email, text_to_html
from app.core.notifications.providers.base import (
    EmailProvider,
    HttpClientMixin,
    preview,
)

logger = logging.getLogger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


class MockEmailProvider(EmailProvider):
    """Logs the email instead of sending it. Always succeeds."""

    name = "mock"

    @property
    def is_mock(self) -> bool:
        return True

    async def _deliver(
        self,
        destination: str,
        content: EmailContent,
        priority: Priority,
    ) -> bool:
        logger.info(
            f"EMAIL_MOCK to={mask_email(destination)} subject={content.subject!r} "
            f"body={preview(content.body, 100)!r}"
        )
        return True


class SmtpEmailProvider(EmailProvider):
    """Email over SMTP. smtplib is blocking, so each send runs in a worker thread."""

    name = "smtp"

    def __init__(
        self,
        sender: str,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        super().__init__(sender)
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(self, destination: str, content: EmailContent) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = content.subject
        message["From"] = self.sender
        message["To"] = destination
        message.set_content(content.body)
        message.add_alternative(text_to_html(content.body), subtype="html")
        return message

    def _connect(self) -> smtplib.SMTP:
        if self.port == 465:
            server: smtplib.SMTP = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.use_tls and self.port != 465:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
        except Exception:
            server.quit()
            raise
        return server

    def _send_blocking(self, message: EmailMessage) -> None:
        with self._connect() as server:
            server.send_message(message)

    async def _deliver(
        self,
        destination: str,
        content: EmailContent,
        priority: Priority,
    ) -> bool:
        message = self.build_message(destination, content)
        await asyncio.to_thread(self._send_blocking, message)
        logger.info(f"SMTP email '{content.subject}' sent to {mask_email(destination)}")
        return True


class SendGridEmailProvider(HttpClientMixin, EmailProvider):
    """Email through the SendGrid v3 mail/send API."""

    name = "sendgrid"

    def __init__(self, sender: str, api_key: str, timeout: float = 10.0):
        super().__init__(sender)
        self.api_key = api_key
        self.timeout = timeout

    def build_payload(self, destination: str, content: EmailContent) -> dict:
        return {
            "personalizations": [{"to": [{"email": destination}]}],
            "from": {"email": self.sender},
            "subject": content.subject,
            "content": [
                {"type": "text/plain", "value": content.body},
                {"type": "text/html", "value": text_to_html(content.body)},
            ],
        }

    async def _deliver(
        self,
        destination: str,
        content: EmailContent,
        priority: Priority,
    ) -> bool:
        client = await self._get_client()
        response = await client.post(
            SENDGRID_SEND_URL,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json=self.build_payload(destination, content),
        )

        if not response.is_success:
            logger.error(
                f"SendGrid send failed with {response.status_code}: {response.text[:200]}"
            )
            return False

        logger.info(f"SendGrid email '{content.subject}' sent to {mask_email(destination)}")
        return True
