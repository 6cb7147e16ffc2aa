"""Channel providers (one per vendor, plus mocks) and their factory."""

from app.core.notifications.providers.base import (
    ChannelProvider,
    EmailProvider,
    TextProvider,
)
from app.core.notifications.providers.email import (
    MockEmailProvider,
    SendGridEmailProvider,
    SmtpEmailProvider,
)
from app.core.notifications.providers.factory import (
    create_email_provider,
    create_sms_provider,
    create_whatsapp_provider,
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

__all__ = [
    "ChannelProvider",
    "EmailProvider",
    "TextProvider",
    "MockSmsProvider",
    "TwilioSmsProvider",
    "Msg91SmsProvider",
    "MockEmailProvider",
    "SmtpEmailProvider",
    "SendGridEmailProvider",
    "MockWhatsAppProvider",
    "TwilioWhatsAppProvider",
    "MetaWhatsAppProvider",
    "create_sms_provider",
    "create_email_provider",
    "create_whatsapp_provider",
]
