"""SMS providers: Twilio, MSG91 and a log-only mock."""

import logging
from typing import Optional

from app.core.notifications.models import Channel, Priority
from app.core.notifications.normalize import mask_phone
from app.core.notifications.providers.base import (
    HttpClientMixin,
    TextProvider,
    preview,
)

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"
MSG91_FLOW_URL = "https://api.msg91.com/api/v5/flow/"


class MockSmsProvider(TextProvider):
    """Logs the message instead of sending it. Always succeeds."""

    channel = Channel.SMS
    name = "mock"

    @property
    def is_mock(self) -> bool:
        return True

    async def _deliver(self, destination: str, content: str, priority: Priority) -> bool:
        logger.info(
            f"SMS_MOCK to={mask_phone(destination)} priority={priority.value} "
            f"message={preview(content)!r}"
        )
        return True


class TwilioSmsProvider(HttpClientMixin, TextProvider):
    """SMS through the Twilio Messages REST API."""

    channel = Channel.SMS
    name = "twilio"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        timeout: float = 10.0,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout

    @property
    def messages_url(self) -> str:
        return f"{TWILIO_API_BASE}/Accounts/{self.account_sid}/Messages.json"

    def _address(self, number: str) -> str:
        return number

    async def _deliver(self, destination: str, content: str, priority: Priority) -> bool:
        client = await self._get_client()
        response = await client.post(
            self.messages_url,
            auth=(self.account_sid, self.auth_token),
            data={
                "To": self._address(destination),
                "From": self._address(self.from_number),
                "Body": content,
            },
        )

        if not response.is_success:
            logger.error(
                f"Twilio {self.channel.value} failed with {response.status_code}: "
                f"{response.text[:200]}"
            )
            return False

        sid = response.json().get("sid")
        logger.info(f"Twilio {self.channel.value} sent to {mask_phone(destination)} sid={sid}")
        return True


class Msg91SmsProvider(HttpClientMixin, TextProvider):
    """SMS through the MSG91 Flow API. The message fills template variable VAR1."""

    channel = Channel.SMS
    name = "msg91"

    def __init__(
        self,
        auth_key: str,
        sender_id: str = "HOSPTL",
        template_id: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.auth_key = auth_key
        self.sender_id = sender_id
        self.template_id = template_id
        self.timeout = timeout

    async def _deliver(self, destination: str, content: str, priority: Priority) -> bool:
        client = await self._get_client()
        response = await client.post(
            MSG91_FLOW_URL,
            headers={"authkey": self.auth_key},
            json={
                "flow_id": self.template_id,
                "sender": self.sender_id,
                "mobiles": destination.lstrip("+"),
                "VAR1": content,
            },
        )

        data = response.json() if response.content else {}
        if not response.is_success or data.get("type") != "success":
            logger.error(f"MSG91 SMS failed with {response.status_code}: {data}")
            return False

        logger.info(
            f"MSG91 SMS sent to {mask_phone(destination)} "
            f"request_id={data.get('request_id')}"
        )
        return True
