"""
Scheduling Module

Doctor slot listings, appointment conflict detection and the reminder
sweep that feeds the notification service.

Usage:
    from app.core.scheduling import (
        AvailabilityService,
        ReminderScheduler,
        InMemoryAppointmentStore,
    )

    availability = AvailabilityService(store)
    day = await availability.get_availability("doc-1", date(2025, 1, 10))
    print(day.available_slots)

    result = await availability.check_conflict("doc-1", date(2025, 1, 10), "10:15")
    print(result.next_available_slot)
"""

# Data types
from app.core.scheduling.models import (
    AppointmentSlot,
    AppointmentStatus,
    Booking,
    ConflictCheckResult,
    ConflictingBooking,
    DayAvailability,
    ReminderWindow,
    SweepResult,
)

# Appointment store
from app.core.scheduling.store import (
    AppointmentStore,
    InMemoryAppointmentStore,
)

# Slots and conflicts
from app.core.scheduling.slots import (
    AvailabilityService,
    DaySchedule,
    DEFAULT_WEEKLY_SCHEDULE,
    check_conflict,
    generate_slots,
    next_available_start,
    overlaps,
    weekly_schedule,
)

# Reminders
from app.core.scheduling.reminders import (
    InMemoryReminderLedger,
    ReminderLedger,
    ReminderScheduler,
    classify_window,
)

__all__ = [
    # Data types
    "AppointmentSlot",
    "AppointmentStatus",
    "Booking",
    "ConflictCheckResult",
    "ConflictingBooking",
    "DayAvailability",
    "ReminderWindow",
    "SweepResult",
    # Store
    "AppointmentStore",
    "InMemoryAppointmentStore",
    # Slots and conflicts
    "AvailabilityService",
    "DaySchedule",
    "DEFAULT_WEEKLY_SCHEDULE",
    "check_conflict",
    "generate_slots",
    "next_available_start",
    "overlaps",
    "weekly_schedule",
    # Reminders
    "InMemoryReminderLedger",
    "ReminderLedger",
    "ReminderScheduler",
    "classify_window",
]
