"""Scheduling data types: bookings, slots, conflict and sweep results."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


# Statuses that no longer occupy the doctor's time
INACTIVE_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW})

# Statuses eligible for reminders
REMINDABLE_STATUSES = frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED})


def parse_hhmm(value: str) -> int:
    """Convert ``HH:MM`` to minutes after midnight."""
    hours, minutes = value.split(":")
    hour, minute = int(hours), int(minutes)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time of day: {value!r}")
    return hour * 60 + minute


def format_hhmm(minutes: int) -> str:
    """Convert minutes after midnight to ``HH:MM``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass
class Booking:
    """An existing appointment as read from the appointment store."""

    id: str
    doctor_id: str
    appointment_date: date
    appointment_time: str  # HH:MM, clinic local time
    patient_name: str
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    patient_phone: Optional[str] = None
    patient_email: Optional[str] = None
    doctor_name: str = ""
    department: Optional[str] = None

    @property
    def start_minutes(self) -> int:
        return parse_hhmm(self.appointment_time)

    @property
    def has_contact(self) -> bool:
        return bool(self.patient_phone or self.patient_email)


@dataclass
class AppointmentSlot:
    """Derived bookable interval. Never persisted."""

    start: str
    end: str
    is_booked: bool = False

    @property
    def is_available(self) -> bool:
        return not self.is_booked

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "is_booked": self.is_booked,
            "is_available": self.is_available,
        }


@dataclass
class DayAvailability:
    """Slot listing for one doctor and day."""

    date: date
    day_of_week: str
    slots: list[AppointmentSlot] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def total_slots(self) -> int:
        return len(self.slots)

    @property
    def available_slots(self) -> int:
        return sum(1 for slot in self.slots if slot.is_available)

    @property
    def booked_slots(self) -> int:
        return sum(1 for slot in self.slots if slot.is_booked)

    def to_dict(self) -> dict:
        result = {
            "date": self.date.isoformat(),
            "day_of_week": self.day_of_week,
            "slots": [slot.to_dict() for slot in self.slots],
            "total_slots": self.total_slots,
            "available_slots": self.available_slots,
            "booked_slots": self.booked_slots,
        }
        if self.message:
            result["message"] = self.message
        return result


@dataclass
class ConflictingBooking:
    """Summary of a booking that overlaps a proposed interval."""

    appointment_id: str
    patient_name: str
    time: str

    def to_dict(self) -> dict:
        return {
            "appointment_id": self.appointment_id,
            "patient_name": self.patient_name,
            "time": self.time,
        }


@dataclass
class ConflictCheckResult:
    """Outcome of testing a proposed appointment against existing bookings."""

    has_conflict: bool
    conflicts: list[ConflictingBooking] = field(default_factory=list)
    next_available_slot: Optional[str] = None
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "has_conflict": self.has_conflict,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "next_available_slot": self.next_available_slot,
            "message": self.message,
        }


class ReminderWindow(str, Enum):
    """Firing windows before an appointment."""
    DAY_BEFORE = "24h"
    HOUR_BEFORE = "1h"


@dataclass
class SweepResult:
    """Counts from one reminder sweep."""

    total_appointments: int = 0
    reminders_sent: int = 0
    duplicates_skipped: int = 0

    def to_dict(self) -> dict:
        return {
            "total_appointments": self.total_appointments,
            "reminders_sent": self.reminders_sent,
            "duplicates_skipped": self.duplicates_skipped,
        }
