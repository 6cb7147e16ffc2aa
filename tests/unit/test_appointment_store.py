"""Tests for the SQL-backed appointment store."""

from contextlib import asynccontextmanager
from datetime import date

import pytest
from unittest.mock import MagicMock

from app.core.scheduling import AppointmentStatus
from app.infra.appointments import SqlAppointmentStore, to_booking
from app.models.database import Appointment, Doctor, Patient


def make_row(**overrides) -> Appointment:
    row = Appointment(
        id="apt-1",
        doctor_id="doc-1",
        patient_id="pat-1",
        appointment_date=date(2025, 1, 10),
        appointment_time="10:00",
        department="Cardiology",
        status=AppointmentStatus.CONFIRMED,
    )
    row.doctor = Doctor(id="doc-1", name="Rao")
    row.patient = Patient(id="pat-1", name="Asha", contact="9876543210", email="asha@example.com")
    for key, value in overrides.items():
        setattr(row, key, value)
    return row


class FakeSession:
    """Captures executed statements and returns canned rows."""

    def __init__(self, rows):
        self.statements = []
        self.result = MagicMock()
        self.result.scalars.return_value.all.return_value = rows
        self.result.scalar_one_or_none.return_value = rows[0] if rows else None

    async def execute(self, statement):
        self.statements.append(statement)
        return self.result

    def context(self):
        @asynccontextmanager
        async def session_context():
            yield self
        return session_context


class TestToBooking:
    """Test ORM row conversion."""

    def test_converts_contact_fields(self):
        booking = to_booking(make_row())

        assert booking.id == "apt-1"
        assert booking.patient_name == "Asha"
        assert booking.patient_phone == "9876543210"
        assert booking.patient_email == "asha@example.com"
        assert booking.doctor_name == "Rao"
        assert booking.department == "Cardiology"
        assert booking.status == AppointmentStatus.CONFIRMED

    def test_missing_patient(self):
        booking = to_booking(make_row(patient=None))

        assert booking.patient_name == ""
        assert not booking.has_contact


class TestSqlAppointmentStore:
    """Test queries issued by the store."""

    @pytest.mark.asyncio
    async def test_list_doctor_bookings_filters_inactive(self):
        session = FakeSession([make_row()])
        store = SqlAppointmentStore(session_context=session.context())

        bookings = await store.list_doctor_bookings("doc-1", date(2025, 1, 10), "apt-9")

        assert [b.id for b in bookings] == ["apt-1"]
        sql = str(session.statements[0])
        assert "appointments.doctor_id" in sql
        assert "NOT IN" in sql
        assert "appointments.id !=" in sql

    @pytest.mark.asyncio
    async def test_list_upcoming_orders_by_start(self):
        session = FakeSession([make_row()])
        store = SqlAppointmentStore(session_context=session.context())

        await store.list_upcoming(date(2025, 1, 9), date(2025, 1, 11))

        sql = str(session.statements[0])
        assert "appointments.status IN" in sql
        assert "ORDER BY appointments.appointment_date, appointments.appointment_time" in sql

    @pytest.mark.asyncio
    async def test_get_missing(self):
        session = FakeSession([])
        store = SqlAppointmentStore(session_context=session.context())

        assert await store.get("nope") is None
