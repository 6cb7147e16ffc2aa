"""WhatsApp providers: Twilio, Meta Cloud API and a log-only mock."""

import logging

from app.core.notifications.models import Channel, Priority
from app.core.notifications.normalize import mask_phone
from app.core.notifications.providers.base import (
    HttpClientMixin,
    TextProvider,
    preview,
)
from app.core.notifications.providers.sms import TwilioSmsProvider

logger = logging.getLogger(__name__)

META_GRAPH_BASE = "https://graph.facebook.com/v17.0"


class MockWhatsAppProvider(TextProvider):
    """Logs the message instead of sending it. Always succeeds."""

    channel = Channel.WHATSAPP
    name = "mock"

    @property
    def is_mock(self) -> bool:
        return True

    async def _deliver(self, destination: str, content: str, priority: Priority) -> bool:
        logger.info(
            f"WHATSAPP_MOCK to={mask_phone(destination)} priority={priority.value} "
            f"message={preview(content, 100)!r}"
        )
        return True


class TwilioWhatsAppProvider(TwilioSmsProvider):
    """WhatsApp over the Twilio Messages API (``whatsapp:`` addresses)."""

    channel = Channel.WHATSAPP
    name = "twilio"

    def _address(self, number: str) -> str:
        if number.startswith("whatsapp:"):
            return number
        return f"whatsapp:{number}"


class MetaWhatsAppProvider(HttpClientMixin, TextProvider):
    """WhatsApp through the Meta Graph API Cloud messages endpoint."""

    channel = Channel.WHATSAPP
    name = "meta"

    def __init__(self, access_token: str, phone_number_id: str, timeout: float = 10.0):
        self.access_token = access_token
        self.phone_number_id = phone_number_id
        self.timeout = timeout

    async def _deliver(self, destination: str, content: str, priority: Priority) -> bool:
        client = await self._get_client()
        response = await client.post(
            f"{META_GRAPH_BASE}/{self.phone_number_id}/messages",
            headers={"Authorization": f"Bearer {self.access_token}"},
            json={
                "messaging_product": "whatsapp",
                "recipient_type": "individual",
                "to": destination.lstrip("+"),
                "type": "text",
                "text": {"body": content},
            },
        )

        if not response.is_success:
            logger.error(
                f"Meta WhatsApp failed with {response.status_code}: {response.text[:200]}"
            )
            return False

        messages = response.json().get("messages") or [{}]
        logger.info(
            f"Meta WhatsApp sent to {mask_phone(destination)} "
            f"message_id={messages[0].get('id')}"
        )
        return True
