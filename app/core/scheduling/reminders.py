"""
Reminder Scheduler

Sweeps upcoming appointments and sends an appointment reminder to those
inside the 24-hour window (23h < t <= 25h) or the 1-hour window
(0.5h < t <= 2h). A ledger of sent reminders keyed by appointment, start
time and window keeps repeated sweeps from resending.
"""

import logging
import time
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Mapping, Optional, Protocol

from app.core.notifications import (
    DeliveryResult,
    NotificationKind,
    NotificationPayload,
    NotificationService,
)
from app.core.scheduling.models import (
    Booking,
    ReminderWindow,
    SweepResult,
    parse_hhmm,
)
from app.core.scheduling.store import AppointmentStore

logger = logging.getLogger(__name__)

DEFAULT_LOOKAHEAD_DAYS = 2
DEFAULT_MARKER_TTL_SECONDS = 3 * 24 * 3600


class ReminderLedger(Protocol):
    """Records reminders already sent."""

    async def claim(self, key: str) -> bool:
        """Mark key as sent. False if it was already marked."""
        ...

    async def release(self, key: str) -> None:
        """Drop a marker (used when the send did not reach anyone)."""
        ...


class InMemoryReminderLedger:
    """Process-local ledger with expiring markers."""

    def __init__(self, ttl_seconds: int = DEFAULT_MARKER_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self._markers: dict[str, float] = {}

    def _purge(self, now: float) -> None:
        expired = [key for key, expires in self._markers.items() if expires <= now]
        for key in expired:
            del self._markers[key]

    async def claim(self, key: str) -> bool:
        now = time.monotonic()
        self._purge(now)
        if key in self._markers:
            return False
        self._markers[key] = now + self.ttl_seconds
        return True

    async def release(self, key: str) -> None:
        self._markers.pop(key, None)


def classify_window(hours_until: float) -> Optional[ReminderWindow]:
    """Pick the reminder window an appointment falls into, if any."""
    if 23 < hours_until <= 25:
        return ReminderWindow.DAY_BEFORE
    if 0.5 < hours_until <= 2:
        return ReminderWindow.HOUR_BEFORE
    return None


def appointment_datetime(booking: Booking, tz: tzinfo) -> datetime:
    """Combine a booking's local date and HH:MM time into an aware datetime."""
    minutes = parse_hhmm(booking.appointment_time)
    return datetime(
        booking.appointment_date.year,
        booking.appointment_date.month,
        booking.appointment_date.day,
        minutes // 60,
        minutes % 60,
        tzinfo=tz,
    )


def reminder_key(booking: Booking, window: ReminderWindow) -> str:
    return (
        f"{booking.id}:{booking.appointment_date.isoformat()}T"
        f"{booking.appointment_time}:{window.value}"
    )


class ReminderScheduler:
    """Finds appointments due for a reminder and sends them."""

    def __init__(
        self,
        notifications: NotificationService,
        store: AppointmentStore,
        ledger: Optional[ReminderLedger] = None,
        tz: tzinfo = timezone.utc,
        lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS,
        template_defaults: Optional[Mapping[str, str]] = None,
    ):
        """Initialize scheduler.

        Args:
            notifications: Service used to deliver reminders
            store: Appointment source
            ledger: Sent-reminder markers (in-memory if omitted)
            tz: Timezone of stored appointment dates and times
            lookahead_days: How far ahead a sweep looks
            template_defaults: Hospital-wide placeholder values
        """
        self.notifications = notifications
        self.store = store
        self.ledger = ledger or InMemoryReminderLedger()
        self.tz = tz
        self.lookahead_days = lookahead_days
        self.template_defaults = dict(template_defaults or {})

    def build_payload(
        self,
        booking: Booking,
        window: Optional[ReminderWindow] = None,
    ) -> NotificationPayload:
        """Reminder payload for a booking."""
        data = {
            **self.template_defaults,
            "patientName": booking.patient_name,
            "doctorName": booking.doctor_name,
            "date": booking.appointment_date.strftime("%d/%m/%Y"),
            "time": booking.appointment_time,
            "department": booking.department or "General",
            "appointmentId": booking.id,
        }
        if window is not None:
            data["reminderWindow"] = window.value

        return NotificationPayload(
            kind=NotificationKind.APPOINTMENT_REMINDER,
            recipient_phone=booking.patient_phone or None,
            recipient_email=booking.patient_email or None,
            data=data,
        )

    async def send_reminder(self, booking: Booking) -> DeliveryResult:
        """Send a reminder for one booking right away, outside any window."""
        return await self.notifications.send(self.build_payload(booking))

    async def sweep(self, now: Optional[datetime] = None) -> SweepResult:
        """Send reminders for every upcoming appointment inside a window.

        Args:
            now: Reference time (defaults to the current time)

        Returns:
            SweepResult with appointments considered and reminders sent
        """
        now = (now or datetime.now(self.tz)).astimezone(self.tz)
        horizon = now + timedelta(days=self.lookahead_days)

        bookings = await self.store.list_upcoming(now.date(), horizon.date())
        result = SweepResult(total_appointments=len(bookings))

        for booking in bookings:
            if not booking.has_contact:
                continue
            try:
                await self._remind_if_due(booking, now, result)
            except Exception:
                logger.exception(f"Failed to process reminder for appointment {booking.id}")

        logger.info(
            f"Reminder sweep: {result.total_appointments} appointments, "
            f"{result.reminders_sent} reminders sent, "
            f"{result.duplicates_skipped} already sent"
        )
        return result

    async def _remind_if_due(self, booking: Booking, now: datetime, result: SweepResult) -> None:
        hours_until = (appointment_datetime(booking, self.tz) - now) / timedelta(hours=1)
        window = classify_window(hours_until)
        if window is None:
            return

        key = reminder_key(booking, window)
        if not await self.ledger.claim(key):
            result.duplicates_skipped += 1
            return

        delivery = await self.notifications.send(self.build_payload(booking, window))
        if not delivery.any_sent:
            await self.ledger.release(key)
        result.reminders_sent += 1
