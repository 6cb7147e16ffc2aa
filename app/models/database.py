"""
Database Models

SQLAlchemy ORM models for the slice of the hospital schema the
notification engine reads: doctors, patients and their appointments.
The schema itself is owned and migrated by the hospital application.
"""

import uuid
from datetime import date, datetime
from typing import Optional, List

from sqlalchemy import (
    Date, DateTime, ForeignKey, Index, String, Text,
    Enum as SQLEnum, text
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from app.core.scheduling.models import AppointmentStatus


def _uuid() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )


class Doctor(Base, TimestampMixin):
    """Doctor model."""

    __tablename__ = "doctors"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", back_populates="doctor"
    )

    def __repr__(self) -> str:
        return f"<Doctor(id={self.id}, name='{self.name}')>"


class Patient(Base, TimestampMixin):
    """
    Patient model.

    Only the contact fields used for notifications are mapped.
    """

    __tablename__ = "patients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    mrn: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    contact: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", back_populates="patient"
    )

    def __repr__(self) -> str:
        return f"<Patient(id={self.id}, name='{self.name}')>"


class Appointment(Base, TimestampMixin):
    """
    Appointment model.

    Date and HH:MM start time are stored separately in clinic local time.
    """

    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointment_doctor_date", "doctor_id", "appointment_date"),
        Index("idx_appointment_status_date", "status", "appointment_date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    doctor_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("doctors.id", ondelete="CASCADE"),
        nullable=False
    )
    patient_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False
    )
    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    appointment_time: Mapped[str] = mapped_column(String(5), nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[AppointmentStatus] = mapped_column(
        SQLEnum(
            AppointmentStatus,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=AppointmentStatus.SCHEDULED
    )

    # Relationships
    doctor: Mapped["Doctor"] = relationship("Doctor", back_populates="appointments")
    patient: Mapped["Patient"] = relationship("Patient", back_populates="appointments")

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, doctor_id={self.doctor_id}, "
            f"date={self.appointment_date}, time={self.appointment_time}, "
            f"status={self.status.value})>"
        )
