"""Notification types shared by templates, providers and the orchestrator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class NotificationKind(str, Enum):
    """Every message the hospital can send. Each kind has one template set."""

    APPOINTMENT_REMINDER = "APPOINTMENT_REMINDER"
    APPOINTMENT_CONFIRMATION = "APPOINTMENT_CONFIRMATION"
    APPOINTMENT_CANCELLED = "APPOINTMENT_CANCELLED"
    LAB_RESULT_READY = "LAB_RESULT_READY"
    CRITICAL_VALUE_ALERT = "CRITICAL_VALUE_ALERT"
    DISCHARGE_SUMMARY = "DISCHARGE_SUMMARY"
    PRESCRIPTION_READY = "PRESCRIPTION_READY"
    PAYMENT_RECEIPT = "PAYMENT_RECEIPT"
    BILL_GENERATED = "BILL_GENERATED"
    PASSWORD_RESET = "PASSWORD_RESET"
    EMERGENCY_ALERT = "EMERGENCY_ALERT"
    ADMISSION_NOTIFICATION = "ADMISSION_NOTIFICATION"
    SURGERY_SCHEDULED = "SURGERY_SCHEDULED"
    BLOOD_REQUEST_URGENT = "BLOOD_REQUEST_URGENT"


class Priority(str, Enum):
    """Caller-declared urgency. Carried through to providers and logs."""

    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class Channel(str, Enum):
    """Delivery media."""

    SMS = "sms"
    EMAIL = "email"
    WHATSAPP = "whatsapp"


DEFAULT_CHANNELS = frozenset({Channel.SMS, Channel.EMAIL})

TemplateValue = Union[str, int, float, bool]


@dataclass
class NotificationPayload:
    """One notification request.

    With neither phone nor email set, sending is a no-op rather than an
    error.
    """

    kind: NotificationKind
    recipient_phone: Optional[str] = None
    recipient_email: Optional[str] = None
    message: Optional[str] = None  # overrides the rendered SMS text
    subject: Optional[str] = None  # overrides the rendered email subject
    data: dict[str, TemplateValue] = field(default_factory=dict)
    priority: Priority = Priority.NORMAL

    def __post_init__(self):
        # Plain strings from programmatic callers; unknown values become NORMAL
        if not isinstance(self.priority, Priority):
            try:
                self.priority = Priority(str(self.priority).upper())
            except ValueError:
                self.priority = Priority.NORMAL

    @property
    def has_recipient(self) -> bool:
        return bool(self.recipient_phone or self.recipient_email)


@dataclass
class DeliveryResult:
    """Per-channel outcome of a send. Failures are simply False."""

    sms_sent: bool = False
    email_sent: bool = False
    whatsapp_sent: bool = False

    @property
    def any_sent(self) -> bool:
        return self.sms_sent or self.email_sent or self.whatsapp_sent

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "sms_sent": self.sms_sent,
            "email_sent": self.email_sent,
            "whatsapp_sent": self.whatsapp_sent,
        }


@dataclass(frozen=True)
class EmailContent:
    """Rendered email handed to an email provider."""

    subject: str
    body: str
