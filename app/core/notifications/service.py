"""
Notification Service

Renders templates for a payload and fans the result out to the SMS,
email and (opt-in) WhatsApp providers. Also owns the in-process
delivery queue, drained by a single cooperative loop with a fixed pause
between sends.

Nothing in here raises to the caller: failures surface only as False
channel flags in DeliveryResult and as log lines.
"""

import asyncio
import logging
from collections import deque
from typing import Iterable, Optional, Union

from app.config import Settings
from app.core.notifications.models import (
    DEFAULT_CHANNELS,
    Channel,
    DeliveryResult,
    EmailContent,
    NotificationKind,
    NotificationPayload,
    Priority,
)
from app.core.notifications.normalize import (
    DEFAULT_COUNTRY_CODE,
    mask_email,
    mask_phone,
    normalize_phone,
)
from app.core.notifications.providers import (
    EmailProvider,
    MockEmailProvider,
    MockSmsProvider,
    MockWhatsAppProvider,
    TextProvider,
    create_email_provider,
    create_sms_provider,
    create_whatsapp_provider,
)
from app.core.notifications.templates import Template, get_template, render

logger = logging.getLogger(__name__)


def _resolve_kind(kind: Union[NotificationKind, str]) -> Optional[NotificationKind]:
    if isinstance(kind, NotificationKind):
        return kind
    try:
        return NotificationKind(kind)
    except ValueError:
        return None


class NotificationService:
    """
    Orchestrates template rendering and per-channel delivery.

    Providers are injected so tests and the web layer share one explicit
    instance instead of module globals. The queue is FIFO; ``priority``
    travels with each payload but does not reorder it.
    """

    def __init__(
        self,
        sms_provider: Optional[TextProvider] = None,
        email_provider: Optional[EmailProvider] = None,
        whatsapp_provider: Optional[TextProvider] = None,
        country_code: str = DEFAULT_COUNTRY_CODE,
        send_delay: float = 0.1,
    ):
        """Initialize service.

        Args:
            sms_provider: SMS backend (mock if omitted)
            email_provider: Email backend (mock if omitted)
            whatsapp_provider: WhatsApp backend (mock if omitted)
            country_code: Prefix for bare 10-digit phone numbers
            send_delay: Seconds to wait between queued sends
        """
        self.sms_provider = sms_provider or MockSmsProvider()
        self.email_provider = email_provider or MockEmailProvider(sender="noreply@hospital.com")
        self.whatsapp_provider = whatsapp_provider or MockWhatsAppProvider()
        self.country_code = country_code
        self.send_delay = send_delay

        self._queue: deque[NotificationPayload] = deque()
        self._processing = False

    # === Immediate delivery ===

    async def send(
        self,
        payload: NotificationPayload,
        channels: Optional[Iterable[Channel]] = None,
    ) -> DeliveryResult:
        """Render and deliver a notification now.

        Args:
            payload: Notification request
            channels: Channels to use. Defaults to SMS and email;
                WhatsApp is only used when listed explicitly.

        Returns:
            DeliveryResult with one flag per channel
        """
        result = DeliveryResult()

        kind = _resolve_kind(payload.kind)
        template = get_template(kind) if kind else None
        if template is None:
            logger.error(f"Unknown notification kind: {payload.kind!r}")
            return result

        selected = set(channels) if channels is not None else set(DEFAULT_CHANNELS)
        data = payload.data or {}

        if payload.recipient_phone and Channel.SMS in selected:
            text = payload.message or render(template.sms_text, data)
            result.sms_sent = await self._send_text(
                self.sms_provider, payload.recipient_phone, text, payload.priority
            )

        if payload.recipient_email and Channel.EMAIL in selected:
            result.email_sent = await self.email_provider.send(
                payload.recipient_email,
                self._render_email(template, payload),
                payload.priority,
            )

        if payload.recipient_phone and Channel.WHATSAPP in selected:
            text = render(template.whatsapp_text, data)
            result.whatsapp_sent = await self._send_text(
                self.whatsapp_provider, payload.recipient_phone, text, payload.priority
            )

        logger.info(
            f"Notification {kind.value} priority={payload.priority.value} "
            f"phone={mask_phone(payload.recipient_phone)} "
            f"email={mask_email(payload.recipient_email)} "
            f"sms_sent={result.sms_sent} email_sent={result.email_sent} "
            f"whatsapp_sent={result.whatsapp_sent}"
        )
        return result

    async def _send_text(
        self,
        provider: TextProvider,
        phone: str,
        text: str,
        priority: Priority,
    ) -> bool:
        destination = normalize_phone(phone, self.country_code)
        if not destination:
            logger.warning(f"Unusable phone number {mask_phone(phone)}, {provider.channel.value} not sent")
            return False
        return await provider.send(destination, text, priority)

    def _render_email(self, template: Template, payload: NotificationPayload) -> EmailContent:
        data = payload.data or {}
        subject = payload.subject or render(template.email_subject, data)
        return EmailContent(subject=subject, body=render(template.email_body, data))

    # === Delivery queue ===

    def queue(self, payload: NotificationPayload) -> None:
        """Append a payload for later delivery. Does not send."""
        self._queue.append(payload)
        logger.debug(f"Notification queued: {payload.kind} (queue size {len(self._queue)})")

    @property
    def pending(self) -> int:
        """Number of queued payloads."""
        return len(self._queue)

    @property
    def is_processing(self) -> bool:
        return self._processing

    async def process_queue(self) -> int:
        """Drain the queue in FIFO order.

        Only one drain runs at a time; a call made while another drain is
        active returns immediately.

        Returns:
            Number of entries processed by this call
        """
        if self._processing or not self._queue:
            return 0

        self._processing = True
        processed = 0
        try:
            while self._queue:
                payload = self._queue.popleft()
                try:
                    await self.send(payload)
                except Exception:
                    logger.exception(f"Failed to process queued notification {payload.kind}")
                processed += 1
                await asyncio.sleep(self.send_delay)
        finally:
            self._processing = False

        logger.debug(f"Notification queue drained ({processed} entries)")
        return processed

    async def close(self) -> None:
        """Close provider network clients."""
        for provider in (self.sms_provider, self.email_provider, self.whatsapp_provider):
            await provider.close()

    # === Convenience senders ===

    async def send_appointment_reminder(
        self,
        phone: Optional[str],
        email: Optional[str],
        data: dict,
    ) -> DeliveryResult:
        return await self.send(NotificationPayload(
            kind=NotificationKind.APPOINTMENT_REMINDER,
            recipient_phone=phone,
            recipient_email=email,
            data=data,
        ))

    async def send_lab_result_ready(
        self,
        phone: Optional[str],
        email: Optional[str],
        data: dict,
    ) -> DeliveryResult:
        return await self.send(NotificationPayload(
            kind=NotificationKind.LAB_RESULT_READY,
            recipient_phone=phone,
            recipient_email=email,
            data=data,
        ))

    async def send_critical_value_alert(
        self,
        phone: Optional[str],
        email: Optional[str],
        data: dict,
    ) -> DeliveryResult:
        return await self.send(NotificationPayload(
            kind=NotificationKind.CRITICAL_VALUE_ALERT,
            recipient_phone=phone,
            recipient_email=email,
            data=data,
            priority=Priority.URGENT,
        ))

    async def send_payment_receipt(
        self,
        phone: Optional[str],
        email: Optional[str],
        data: dict,
    ) -> DeliveryResult:
        return await self.send(NotificationPayload(
            kind=NotificationKind.PAYMENT_RECEIPT,
            recipient_phone=phone,
            recipient_email=email,
            data=data,
        ))

    async def send_emergency_alert(
        self,
        phone: Optional[str],
        email: Optional[str],
        data: dict,
    ) -> DeliveryResult:
        return await self.send(NotificationPayload(
            kind=NotificationKind.EMERGENCY_ALERT,
            recipient_phone=phone,
            recipient_email=email,
            data=data,
            priority=Priority.URGENT,
        ))


def build_notification_service(settings: Settings) -> NotificationService:
    """Create a NotificationService wired to the configured providers."""
    return NotificationService(
        sms_provider=create_sms_provider(settings),
        email_provider=create_email_provider(settings),
        whatsapp_provider=create_whatsapp_provider(settings),
        country_code=settings.default_country_code,
        send_delay=settings.queue_send_delay_seconds,
    )
