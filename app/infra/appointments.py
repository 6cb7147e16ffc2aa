"""
SQL Appointment Store

AppointmentStore backed by the hospital database through async
SQLAlchemy. Rows are converted to plain Booking objects so the
scheduling code never touches ORM instances.
"""

import logging
from contextlib import AbstractAsyncContextManager
from datetime import date
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.scheduling.models import (
    INACTIVE_STATUSES,
    REMINDABLE_STATUSES,
    Booking,
)
from app.infra.database import get_db_context
from app.models.database import Appointment

logger = logging.getLogger(__name__)

SessionContext = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def to_booking(row: Appointment) -> Booking:
    """Convert an Appointment row (with doctor and patient loaded)."""
    return Booking(
        id=row.id,
        doctor_id=row.doctor_id,
        appointment_date=row.appointment_date,
        appointment_time=row.appointment_time,
        status=row.status,
        patient_name=row.patient.name if row.patient else "",
        patient_phone=row.patient.contact if row.patient else None,
        patient_email=row.patient.email if row.patient else None,
        doctor_name=row.doctor.name if row.doctor else "",
        department=row.department,
    )


class SqlAppointmentStore:
    """AppointmentStore over the appointments table."""

    def __init__(self, session_context: SessionContext = get_db_context):
        self._session_context = session_context

    def _base_query(self):
        return select(Appointment).options(
            selectinload(Appointment.patient),
            selectinload(Appointment.doctor),
        )

    async def list_doctor_bookings(
        self,
        doctor_id: str,
        day: date,
        exclude_appointment_id: Optional[str] = None,
    ) -> list[Booking]:
        query = self._base_query().where(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == day,
            Appointment.status.not_in(list(INACTIVE_STATUSES)),
        )
        if exclude_appointment_id:
            query = query.where(Appointment.id != exclude_appointment_id)

        async with self._session_context() as db:
            rows = (await db.execute(query)).scalars().all()
        return [to_booking(row) for row in rows]

    async def list_upcoming(self, start: date, end: date) -> list[Booking]:
        query = self._base_query().where(
            Appointment.appointment_date >= start,
            Appointment.appointment_date <= end,
            Appointment.status.in_(list(REMINDABLE_STATUSES)),
        ).order_by(Appointment.appointment_date, Appointment.appointment_time)

        async with self._session_context() as db:
            rows = (await db.execute(query)).scalars().all()
        logger.debug(f"Found {len(rows)} upcoming appointments between {start} and {end}")
        return [to_booking(row) for row in rows]

    async def get(self, appointment_id: str) -> Optional[Booking]:
        query = self._base_query().where(Appointment.id == appointment_id)

        async with self._session_context() as db:
            row = (await db.execute(query)).scalar_one_or_none()
        return to_booking(row) if row else None
