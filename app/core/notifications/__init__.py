"""
Notifications Module

Template-driven SMS, email and WhatsApp delivery with pluggable
provider backends and a best-effort in-process queue.

Usage:
    from app.core.notifications import (
        NotificationPayload,
        NotificationKind,
        build_notification_service,
    )

    service = build_notification_service(get_settings())
    result = await service.send(NotificationPayload(
        kind=NotificationKind.APPOINTMENT_REMINDER,
        recipient_phone="9876543210",
        data={"doctorName": "Rao", "date": "2025-01-10", "time": "10:00"},
    ))
    print(result.sms_sent)
"""

from app.core.notifications.models import (
    Channel,
    DeliveryResult,
    EmailContent,
    NotificationKind,
    NotificationPayload,
    Priority,
)
from app.core.notifications.normalize import (
    is_valid_email,
    mask_email,
    mask_phone,
    normalize_phone,
)
from app.core.notifications.service import (
    NotificationService,
    build_notification_service,
)
from app.core.notifications.templates import (
    TEMPLATES,
    Template,
    get_template,
    render,
)

__all__ = [
    # Models
    "Channel",
    "DeliveryResult",
    "EmailContent",
    "NotificationKind",
    "NotificationPayload",
    "Priority",
    # Templates
    "TEMPLATES",
    "Template",
    "get_template",
    "render",
    # Normalization
    "is_valid_email",
    "mask_email",
    "mask_phone",
    "normalize_phone",
    # Service
    "NotificationService",
    "build_notification_service",
]
