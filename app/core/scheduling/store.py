"""
Appointment store interface.

The relational store is owned by the wider hospital application; the
scheduling code only needs these three read operations. An in-memory
implementation backs tests and local development.
"""

from datetime import date
from typing import Iterable, Optional, Protocol

from app.core.scheduling.models import (
    INACTIVE_STATUSES,
    REMINDABLE_STATUSES,
    Booking,
)


class AppointmentStore(Protocol):
    """Read access to appointments."""

    async def list_doctor_bookings(
        self,
        doctor_id: str,
        day: date,
        exclude_appointment_id: Optional[str] = None,
    ) -> list[Booking]:
        """Active (not cancelled, not no-show) bookings of a doctor on a day."""
        ...

    async def list_upcoming(self, start: date, end: date) -> list[Booking]:
        """Scheduled or confirmed bookings dated within [start, end]."""
        ...

    async def get(self, appointment_id: str) -> Optional[Booking]:
        """Single booking by ID."""
        ...


class InMemoryAppointmentStore:
    """List-backed AppointmentStore."""

    def __init__(self, bookings: Optional[Iterable[Booking]] = None):
        self._bookings: list[Booking] = list(bookings or [])

    def add(self, booking: Booking) -> None:
        self._bookings.append(booking)

    async def list_doctor_bookings(
        self,
        doctor_id: str,
        day: date,
        exclude_appointment_id: Optional[str] = None,
    ) -> list[Booking]:
        return [
            b for b in self._bookings
            if b.doctor_id == doctor_id
            and b.appointment_date == day
            and b.status not in INACTIVE_STATUSES
            and b.id != exclude_appointment_id
        ]

    async def list_upcoming(self, start: date, end: date) -> list[Booking]:
        return [
            b for b in self._bookings
            if start <= b.appointment_date <= end
            and b.status in REMINDABLE_STATUSES
        ]

    async def get(self, appointment_id: str) -> Optional[Booking]:
        for booking in self._bookings:
            if booking.id == appointment_id:
                return booking
        return None
