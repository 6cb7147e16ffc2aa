"""
Slot generation and conflict detection.

Both the availability listing and the conflict check decide "is this
time taken" with the same half-open interval overlap test, where every
existing booking is assumed to last ``booking_minutes``.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Mapping, Optional

from app.core.scheduling.models import (
    AppointmentSlot,
    Booking,
    ConflictCheckResult,
    ConflictingBooking,
    DayAvailability,
    format_hhmm,
    parse_hhmm,
)
from app.core.scheduling.store import AppointmentStore

logger = logging.getLogger(__name__)

DEFAULT_BOOKING_MINUTES = 30
SEARCH_STEP_MINUTES = 30


@dataclass(frozen=True)
class DaySchedule:
    """Opening hours for one weekday."""

    start: str
    end: str
    slot_minutes: int = 30


# Days missing from the table are closed.
DEFAULT_WEEKLY_SCHEDULE: Mapping[str, DaySchedule] = {
    "monday": DaySchedule("09:00", "17:00"),
    "tuesday": DaySchedule("09:00", "17:00"),
    "wednesday": DaySchedule("09:00", "17:00"),
    "thursday": DaySchedule("09:00", "17:00"),
    "friday": DaySchedule("09:00", "17:00"),
    "saturday": DaySchedule("09:00", "13:00"),
}


def weekly_schedule(slot_minutes: int) -> dict[str, DaySchedule]:
    """Default opening hours with a different slot length."""
    return {
        day: replace(hours, slot_minutes=slot_minutes)
        for day, hours in DEFAULT_WEEKLY_SCHEDULE.items()
    }


def weekday_name(day: date) -> str:
    return day.strftime("%A").lower()


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open intervals [start, end) share at least one minute."""
    return start_a < end_b and end_a > start_b


def usable_bookings(bookings: Iterable[Booking]) -> list[Booking]:
    """Drop bookings whose start time is not a valid HH:MM, logging each one."""
    usable = []
    for b in bookings:
        try:
            b.start_minutes
        except (ValueError, AttributeError):
            logger.warning(f"Ignoring appointment {b.id} with malformed time {b.appointment_time!r}")
            continue
        usable.append(b)
    return usable


def is_taken(
    start: int,
    end: int,
    bookings: Iterable[Booking],
    booking_minutes: int = DEFAULT_BOOKING_MINUTES,
) -> bool:
    """Whether [start, end) overlaps any booking."""
    return any(
        overlaps(start, end, b.start_minutes, b.start_minutes + booking_minutes)
        for b in usable_bookings(bookings)
    )


def generate_slots(
    day: date,
    bookings: Iterable[Booking],
    schedule: Mapping[str, DaySchedule] = DEFAULT_WEEKLY_SCHEDULE,
    booking_minutes: int = DEFAULT_BOOKING_MINUTES,
) -> DayAvailability:
    """Build the slot listing for a day.

    Slots run back to back from opening time; a slot is only emitted if it
    ends by closing time.
    """
    day_name = weekday_name(day)
    day_schedule = schedule.get(day_name)
    if day_schedule is None:
        return DayAvailability(
            date=day,
            day_of_week=day_name,
            message="Doctor not available on this day",
        )

    bookings = usable_bookings(bookings)
    duration = day_schedule.slot_minutes
    current = parse_hhmm(day_schedule.start)
    close = parse_hhmm(day_schedule.end)

    slots: list[AppointmentSlot] = []
    while current + duration <= close:
        end = current + duration
        slots.append(AppointmentSlot(
            start=format_hhmm(current),
            end=format_hhmm(end),
            is_booked=is_taken(current, end, bookings, booking_minutes),
        ))
        current = end

    return DayAvailability(date=day, day_of_week=day_name, slots=slots)


def find_conflicts(
    start: int,
    duration: int,
    bookings: Iterable[Booking],
    booking_minutes: int = DEFAULT_BOOKING_MINUTES,
) -> list[Booking]:
    """Bookings overlapping the proposed [start, start + duration)."""
    end = start + duration
    return [
        b for b in usable_bookings(bookings)
        if overlaps(start, end, b.start_minutes, b.start_minutes + booking_minutes)
    ]


def next_available_start(
    duration: int,
    bookings: Iterable[Booking],
    search_start: str = "09:00",
    search_end: str = "17:00",
    booking_minutes: int = DEFAULT_BOOKING_MINUTES,
    step: int = SEARCH_STEP_MINUTES,
) -> Optional[str]:
    """First start time from search_start, in step increments, that is free.

    Returns None when no start before search_end is free.
    """
    bookings = usable_bookings(bookings)
    current = parse_hhmm(search_start)
    end_of_day = parse_hhmm(search_end)

    while current < end_of_day:
        if not is_taken(current, current + duration, bookings, booking_minutes):
            return format_hhmm(current)
        current += step
    return None


def check_conflict(
    start_time: str,
    bookings: Iterable[Booking],
    duration: int = 30,
    search_start: str = "09:00",
    search_end: str = "17:00",
    booking_minutes: int = DEFAULT_BOOKING_MINUTES,
) -> ConflictCheckResult:
    """Test a proposed appointment against existing bookings.

    Example:
        >>> existing = [Booking("a1", "doc-1", date(2025, 1, 10), "10:00", "Asha")]
        >>> check_conflict("10:15", existing).has_conflict
        True
    """
    bookings = usable_bookings(bookings)
    conflicts = find_conflicts(parse_hhmm(start_time), duration, bookings, booking_minutes)

    if not conflicts:
        return ConflictCheckResult(
            has_conflict=False,
            message="No conflicts found. Time slot is available.",
        )

    return ConflictCheckResult(
        has_conflict=True,
        conflicts=[
            ConflictingBooking(
                appointment_id=b.id,
                patient_name=b.patient_name,
                time=b.appointment_time,
            )
            for b in conflicts
        ],
        next_available_slot=next_available_start(
            duration,
            bookings,
            search_start=search_start,
            search_end=search_end,
            booking_minutes=booking_minutes,
        ),
        message=f"Time slot conflicts with {len(conflicts)} existing appointment(s)",
    )


class AvailabilityService:
    """Store-backed slot listing and conflict checks for one clinic."""

    def __init__(
        self,
        store: AppointmentStore,
        schedule: Mapping[str, DaySchedule] = DEFAULT_WEEKLY_SCHEDULE,
        booking_minutes: int = DEFAULT_BOOKING_MINUTES,
        search_start: str = "09:00",
        search_end: str = "17:00",
    ):
        self.store = store
        self.schedule = schedule
        self.booking_minutes = booking_minutes
        self.search_start = search_start
        self.search_end = search_end

    async def get_availability(self, doctor_id: str, day: date) -> DayAvailability:
        """List a doctor's slots for a day with booked flags."""
        bookings = await self.store.list_doctor_bookings(doctor_id, day)
        availability = generate_slots(day, bookings, self.schedule, self.booking_minutes)
        logger.debug(
            f"Availability for doctor {doctor_id} on {day}: "
            f"{availability.available_slots}/{availability.total_slots} free"
        )
        return availability

    async def check_conflict(
        self,
        doctor_id: str,
        day: date,
        start_time: str,
        duration: int = 30,
        exclude_appointment_id: Optional[str] = None,
    ) -> ConflictCheckResult:
        """Check a proposed appointment for a doctor.

        Args:
            doctor_id: Doctor identifier
            day: Appointment date
            start_time: Proposed start, HH:MM
            duration: Proposed length in minutes
            exclude_appointment_id: Booking to ignore (rescheduling in place)

        Returns:
            ConflictCheckResult
        """
        bookings = await self.store.list_doctor_bookings(
            doctor_id, day, exclude_appointment_id=exclude_appointment_id
        )
        return check_conflict(
            start_time,
            bookings,
            duration=duration,
            search_start=self.search_start,
            search_end=self.search_end,
            booking_minutes=self.booking_minutes,
        )
