"""
Channel provider base classes.

A provider delivers one rendered message over one channel. ``send()``
never raises: vendor errors become ``False`` plus an error log line.
"""

import logging
from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

import httpx

from app.core.notifications.models import Channel, EmailContent, Priority
from app.core.notifications.normalize import is_valid_email, mask_email

logger = logging.getLogger(__name__)

ContentT = TypeVar("ContentT")


class ChannelProvider(ABC, Generic[ContentT]):
    """Capability: ``send(destination, content, priority) -> delivered``."""

    channel: Channel
    name: str = "base"

    @property
    def is_mock(self) -> bool:
        return False

    async def send(
        self,
        destination: str,
        content: ContentT,
        priority: Priority = Priority.NORMAL,
    ) -> bool:
        """Deliver content to destination.

        Args:
            destination: Normalized phone number or email address
            content: Rendered message for this channel
            priority: Caller-declared urgency (informational)

        Returns:
            True if the backend accepted the message
        """
        try:
            return await self._deliver(destination, content, priority)
        except Exception as e:
            logger.error(
                f"{self.channel.value} delivery via {self.name} failed: {e}",
                exc_info=True,
            )
            return False

    @abstractmethod
    async def _deliver(
        self,
        destination: str,
        content: ContentT,
        priority: Priority,
    ) -> bool:
        """Vendor-specific delivery. May raise."""

    async def close(self) -> None:
        """Release network resources."""


class TextProvider(ChannelProvider[str]):
    """Provider for single-text channels (SMS, WhatsApp)."""


class EmailProvider(ChannelProvider[EmailContent]):
    """Provider for email. Rejects malformed addresses before delivery."""

    channel = Channel.EMAIL

    def __init__(self, sender: str):
        self.sender = sender

    async def send(
        self,
        destination: str,
        content: EmailContent,
        priority: Priority = Priority.NORMAL,
    ) -> bool:
        if not is_valid_email(destination):
            logger.warning(f"Invalid email address {mask_email(destination)}, not sent")
            return False
        return await super().send(destination, content, priority)


class HttpClientMixin:
    """Lazily created, reused httpx.AsyncClient."""

    timeout: float = 10.0
    _client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


def preview(text: str, limit: int = 50) -> str:
    """Shorten message text for logs."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
