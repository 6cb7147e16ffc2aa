"""
Appointment API Endpoints.

Doctor availability, conflict checks for proposed bookings, and
appointment reminders (periodic sweep and manual send).
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator

from app.api.dependencies import (
    get_appointment_store,
    get_availability_service,
    get_reminder_scheduler,
)
from app.core.scheduling import (
    AppointmentStore,
    AvailabilityService,
    ReminderScheduler,
)
from app.core.scheduling.models import REMINDABLE_STATUSES, parse_hhmm

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Appointments"])


class ConflictCheckRequest(BaseModel):
    """Proposed appointment to test."""

    doctor_id: str = Field(..., min_length=1)
    appointment_date: date = Field(..., examples=["2025-01-10"])
    appointment_time: str = Field(
        ...,
        pattern=r"^\d{2}:\d{2}$",
        examples=["10:15"],
    )
    duration: int = Field(default=30, ge=1, le=24 * 60)
    exclude_appointment_id: Optional[str] = Field(
        default=None,
        description="Appointment to ignore, for rescheduling in place",
    )

    @field_validator("appointment_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        parse_hhmm(value)
        return value


class ConflictItem(BaseModel):
    appointment_id: str
    patient_name: str
    time: str


class ConflictCheckResponse(BaseModel):
    """Conflict check outcome."""
    has_conflict: bool
    conflicts: list[ConflictItem]
    next_available_slot: Optional[str]
    message: str


class SweepResponse(BaseModel):
    """Reminder sweep counts."""
    total_appointments: int
    reminders_sent: int
    duplicates_skipped: int


class ReminderResponse(BaseModel):
    """Manual reminder outcome."""
    message: str
    appointment_id: str
    sent_to: dict[str, Optional[str]]


@router.get(
    "/doctors/{doctor_id}/availability",
    summary="List a doctor's slots for a day",
)
async def get_doctor_availability(
    doctor_id: str,
    day: date = Query(..., alias="date", description="ISO date, YYYY-MM-DD"),
    availability: AvailabilityService = Depends(get_availability_service),
) -> dict:
    result = await availability.get_availability(doctor_id, day)
    return result.to_dict()


@router.post(
    "/appointments/check-conflict",
    response_model=ConflictCheckResponse,
    summary="Check a proposed appointment for overlaps",
)
async def check_appointment_conflict(
    request: ConflictCheckRequest,
    availability: AvailabilityService = Depends(get_availability_service),
) -> ConflictCheckResponse:
    result = await availability.check_conflict(
        doctor_id=request.doctor_id,
        day=request.appointment_date,
        start_time=request.appointment_time,
        duration=request.duration,
        exclude_appointment_id=request.exclude_appointment_id,
    )
    return ConflictCheckResponse(**result.to_dict())


@router.post(
    "/appointments/reminders/sweep",
    response_model=SweepResponse,
    summary="Send due appointment reminders",
)
async def sweep_reminders(
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
) -> SweepResponse:
    result = await scheduler.sweep()
    return SweepResponse(**result.to_dict())


@router.post(
    "/appointments/{appointment_id}/send-reminder",
    response_model=ReminderResponse,
    summary="Send a reminder for one appointment now",
    responses={
        400: {"description": "Appointment is not active or patient has no contact information"},
        404: {"description": "Appointment not found"},
    },
)
async def send_appointment_reminder(
    appointment_id: str,
    store: AppointmentStore = Depends(get_appointment_store),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
) -> ReminderResponse:
    booking = await store.get(appointment_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found",
        )
    if booking.status not in REMINDABLE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Appointment is not active",
        )
    if not booking.has_contact:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Patient has no contact information",
        )

    result = await scheduler.send_reminder(booking)
    return ReminderResponse(
        message="Reminder sent successfully" if result.any_sent else "Reminder could not be delivered",
        appointment_id=appointment_id,
        sent_to={
            "sms": booking.patient_phone if result.sms_sent else None,
            "email": booking.patient_email if result.email_sent else None,
        },
    )
