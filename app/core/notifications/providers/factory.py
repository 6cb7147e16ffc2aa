"""
Provider selection.

Maps the configured provider name per channel to a concrete provider.
When the selected vendor's credentials are incomplete the mock provider
is returned instead, so unconfigured environments only log deliveries.
"""

import logging
from typing import Callable, Optional

from app.config import Settings
from app.core.notifications.providers.base import EmailProvider, TextProvider
from app.core.notifications.providers.email import (
    MockEmailProvider,
    SendGridEmailProvider,
    SmtpEmailProvider,
)
from app.core.notifications.providers.sms import (
    Msg91SmsProvider,
    MockSmsProvider,
    TwilioSmsProvider,
)
from app.core.notifications.providers.whatsapp import (
    MetaWhatsAppProvider,
    MockWhatsAppProvider,
    TwilioWhatsAppProvider,
)

logger = logging.getLogger(__name__)


def _twilio_sms(settings: Settings) -> Optional[TextProvider]:
    if not (
        settings.twilio_account_sid
        and settings.twilio_auth_token
        and settings.twilio_phone_number
    ):
        return None
    return TwilioSmsProvider(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_phone_number,
        timeout=settings.provider_timeout_seconds,
    )


def _msg91_sms(settings: Settings) -> Optional[TextProvider]:
    if not settings.msg91_auth_key:
        return None
    return Msg91SmsProvider(
        auth_key=settings.msg91_auth_key,
        sender_id=settings.msg91_sender_id,
        template_id=settings.msg91_template_id,
        timeout=settings.provider_timeout_seconds,
    )


def _smtp_email(settings: Settings) -> Optional[EmailProvider]:
    if not settings.smtp_host:
        return None
    return SmtpEmailProvider(
        sender=settings.email_from,
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        timeout=settings.provider_timeout_seconds,
    )


def _sendgrid_email(settings: Settings) -> Optional[EmailProvider]:
    if not settings.sendgrid_api_key:
        return None
    return SendGridEmailProvider(
        sender=settings.email_from,
        api_key=settings.sendgrid_api_key,
        timeout=settings.provider_timeout_seconds,
    )


def _twilio_whatsapp(settings: Settings) -> Optional[TextProvider]:
    if not (settings.twilio_account_sid and settings.twilio_auth_token):
        return None
    return TwilioWhatsAppProvider(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_whatsapp_number,
        timeout=settings.provider_timeout_seconds,
    )


def _meta_whatsapp(settings: Settings) -> Optional[TextProvider]:
    if not (settings.meta_whatsapp_token and settings.meta_phone_number_id):
        return None
    return MetaWhatsAppProvider(
        access_token=settings.meta_whatsapp_token,
        phone_number_id=settings.meta_phone_number_id,
        timeout=settings.provider_timeout_seconds,
    )


SMS_BACKENDS: dict[str, Callable[[Settings], Optional[TextProvider]]] = {
    "twilio": _twilio_sms,
    "msg91": _msg91_sms,
}

EMAIL_BACKENDS: dict[str, Callable[[Settings], Optional[EmailProvider]]] = {
    "smtp": _smtp_email,
    "sendgrid": _sendgrid_email,
}

WHATSAPP_BACKENDS: dict[str, Callable[[Settings], Optional[TextProvider]]] = {
    "twilio": _twilio_whatsapp,
    "meta": _meta_whatsapp,
}


def _select(channel: str, name: str, backends: dict, settings: Settings):
    if name == "mock":
        logger.info(f"{channel} provider: mock")
        return None

    builder = backends.get(name)
    provider = builder(settings) if builder else None
    if provider is None:
        logger.info(f"{channel} provider '{name}' has no credentials, using mock delivery")
        return None

    logger.info(f"{channel} provider: {name}")
    return provider


def create_sms_provider(settings: Settings) -> TextProvider:
    """Build the configured SMS provider (mock when unconfigured)."""
    provider = _select("SMS", settings.sms_provider, SMS_BACKENDS, settings)
    return provider or MockSmsProvider()


def create_email_provider(settings: Settings) -> EmailProvider:
    """Build the configured email provider (mock when unconfigured)."""
    provider = _select("Email", settings.email_provider, EMAIL_BACKENDS, settings)
    return provider or MockEmailProvider(sender=settings.email_from)


def create_whatsapp_provider(settings: Settings) -> TextProvider:
    """Build the configured WhatsApp provider (mock when unconfigured)."""
    provider = _select("WhatsApp", settings.whatsapp_provider, WHATSAPP_BACKENDS, settings)
    return provider or MockWhatsAppProvider()
