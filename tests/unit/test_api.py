"""Tests for the HTTP routes."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.core.notifications import NotificationService
from app.core.scheduling import (
    AppointmentStatus,
    Booking,
    InMemoryAppointmentStore,
    InMemoryReminderLedger,
)
from app.main import create_app


@pytest.fixture
def store():
    return InMemoryAppointmentStore([
        Booking(
            id="apt-1",
            doctor_id="doc-1",
            appointment_date=date(2025, 1, 10),
            appointment_time="10:00",
            patient_name="Asha",
            patient_phone="9876543210",
            doctor_name="Rao",
        ),
        Booking(
            id="apt-2",
            doctor_id="doc-1",
            appointment_date=date(2025, 1, 10),
            appointment_time="11:00",
            patient_name="Ravi",
        ),
        Booking(
            id="apt-3",
            doctor_id="doc-2",
            appointment_date=date(2025, 1, 10),
            appointment_time="12:00",
            patient_name="Meena",
            patient_phone="9123456780",
            status=AppointmentStatus.CANCELLED,
        ),
    ])


@pytest.fixture
def client(store):
    """Application with in-memory store and mock providers."""
    app = create_app(
        notification_service=NotificationService(send_delay=0),
        appointment_store=store,
        reminder_ledger=InMemoryReminderLedger(),
    )
    with TestClient(app) as test_client:
        yield test_client


class TestNotificationRoutes:
    """Test /notifications endpoints."""

    def test_send(self, client):
        response = client.post("/notifications/send", json={
            "kind": "APPOINTMENT_REMINDER",
            "recipient_phone": "9876543210",
            "data": {"doctorName": "Rao", "date": "2025-01-10", "time": "10:00"},
        })

        assert response.status_code == 200
        assert response.json() == {
            "sms_sent": True,
            "email_sent": False,
            "whatsapp_sent": False,
        }

    def test_send_whatsapp_opt_in(self, client):
        response = client.post("/notifications/send", json={
            "kind": "APPOINTMENT_CONFIRMATION",
            "recipient_phone": "9876543210",
            "channels": ["whatsapp"],
        })

        assert response.json() == {
            "sms_sent": False,
            "email_sent": False,
            "whatsapp_sent": True,
        }

    def test_unknown_kind_rejected(self, client):
        response = client.post("/notifications/send", json={"kind": "NOPE"})

        assert response.status_code == 422
        assert response.json()["error"] == "Validation error"

    def test_queue_and_process(self, client):
        """Test queued notifications wait until a drain."""
        payload = {"kind": "LAB_RESULT_READY", "recipient_email": "patient@example.com"}

        queued = client.post("/notifications/queue", json=payload)
        client.post("/notifications/queue", json=payload)
        drained = client.post("/notifications/queue/process")

        assert queued.status_code == 202
        assert queued.json() == {"queued": True, "pending": 1}
        assert drained.json() == {"processed": 2, "pending": 0}


class TestAppointmentRoutes:
    """Test availability, conflict and reminder endpoints."""

    def test_availability(self, client):
        response = client.get("/doctors/doc-1/availability", params={"date": "2025-01-10"})

        assert response.status_code == 200
        body = response.json()
        assert body["day_of_week"] == "friday"
        assert body["total_slots"] == 16
        assert body["booked_slots"] == 2
        booked = [s["start"] for s in body["slots"] if s["is_booked"]]
        assert booked == ["10:00", "11:00"]

    def test_availability_closed_day(self, client):
        response = client.get("/doctors/doc-1/availability", params={"date": "2025-01-12"})

        assert response.json()["message"] == "Doctor not available on this day"

    def test_check_conflict(self, client):
        response = client.post("/appointments/check-conflict", json={
            "doctor_id": "doc-1",
            "appointment_date": "2025-01-10",
            "appointment_time": "10:15",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["has_conflict"] is True
        assert body["conflicts"] == [
            {"appointment_id": "apt-1", "patient_name": "Asha", "time": "10:00"}
        ]
        assert body["next_available_slot"] == "09:00"

    def test_check_conflict_reschedule(self, client):
        response = client.post("/appointments/check-conflict", json={
            "doctor_id": "doc-1",
            "appointment_date": "2025-01-10",
            "appointment_time": "10:15",
            "exclude_appointment_id": "apt-1",
        })

        assert response.json()["has_conflict"] is False

    def test_check_conflict_invalid_time(self, client):
        response = client.post("/appointments/check-conflict", json={
            "doctor_id": "doc-1",
            "appointment_date": "2025-01-10",
            "appointment_time": "25:00",
        })

        assert response.status_code == 422

    def test_sweep(self, client):
        response = client.post("/appointments/reminders/sweep")

        assert response.status_code == 200
        assert set(response.json()) == {
            "total_appointments",
            "reminders_sent",
            "duplicates_skipped",
        }

    def test_send_reminder(self, client):
        response = client.post("/appointments/apt-1/send-reminder")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Reminder sent successfully",
            "appointment_id": "apt-1",
            "sent_to": {"sms": "9876543210", "email": None},
        }

    def test_send_reminder_not_found(self, client):
        response = client.post("/appointments/missing/send-reminder")

        assert response.status_code == 404

    def test_send_reminder_without_contact(self, client):
        response = client.post("/appointments/apt-2/send-reminder")

        assert response.status_code == 400
        assert response.json()["detail"] == "Patient has no contact information"

    def test_send_reminder_cancelled(self, client):
        """Test a cancelled appointment is not reminded even with a phone on file."""
        response = client.post("/appointments/apt-3/send-reminder")

        assert response.status_code == 400
        assert response.json()["detail"] == "Appointment is not active"


class TestHealthRoutes:
    """Test probes that do not need external services."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_live_reports_queue(self, client):
        response = client.get("/health/live")

        assert response.json()["status"] == "alive"
        assert response.json()["queue_pending"] == 0
