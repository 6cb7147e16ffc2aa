"""
FastAPI dependencies.

The services are built once in the application lifespan and kept on
``app.state``; routes receive them through these accessors.
"""

from fastapi import Request

from app.core.notifications import NotificationService
from app.core.scheduling import AppointmentStore, AvailabilityService, ReminderScheduler


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service


def get_availability_service(request: Request) -> AvailabilityService:
    return request.app.state.availability_service


def get_reminder_scheduler(request: Request) -> ReminderScheduler:
    return request.app.state.reminder_scheduler


def get_appointment_store(request: Request) -> AppointmentStore:
    return request.app.state.appointment_store
