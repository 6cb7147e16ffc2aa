"""Tests for slot generation and appointment conflict detection."""

from datetime import date

import pytest

from app.core.scheduling import (
    AppointmentStatus,
    AvailabilityService,
    Booking,
    DaySchedule,
    InMemoryAppointmentStore,
    check_conflict,
    generate_slots,
    next_available_start,
    overlaps,
    weekly_schedule,
)

FRIDAY = date(2025, 1, 10)
SATURDAY = date(2025, 1, 11)
SUNDAY = date(2025, 1, 12)


def booking(id: str, time: str, day: date = FRIDAY, doctor_id: str = "doc-1", **kwargs) -> Booking:
    return Booking(
        id=id,
        doctor_id=doctor_id,
        appointment_date=day,
        appointment_time=time,
        patient_name=kwargs.pop("patient_name", f"Patient {id}"),
        **kwargs,
    )


class TestOverlaps:
    """Test the half-open interval predicate."""

    def test_partial_overlap(self):
        assert overlaps(600, 630, 615, 645)

    def test_touching_intervals_do_not_overlap(self):
        """Test [9:00, 9:30) and [9:30, 10:00) are disjoint."""
        assert not overlaps(540, 570, 570, 600)
        assert not overlaps(570, 600, 540, 570)

    def test_containment(self):
        assert overlaps(540, 600, 550, 560)


class TestGenerateSlots:
    """Test slot listings."""

    def test_weekday_slots(self):
        """Test a weekday has 16 half-hour slots from 09:00 to 17:00."""
        result = generate_slots(FRIDAY, [])

        assert result.day_of_week == "friday"
        assert result.total_slots == 16
        assert (result.slots[0].start, result.slots[0].end) == ("09:00", "09:30")
        assert (result.slots[-1].start, result.slots[-1].end) == ("16:30", "17:00")
        assert result.available_slots == 16

    def test_saturday_half_day(self):
        result = generate_slots(SATURDAY, [])

        assert result.total_slots == 8
        assert result.slots[-1].end == "13:00"

    def test_sunday_closed(self):
        """Test days without opening hours return no slots and a message."""
        result = generate_slots(SUNDAY, [])

        assert result.slots == []
        assert result.message == "Doctor not available on this day"
        assert result.to_dict()["message"] == "Doctor not available on this day"

    def test_exact_start_is_booked(self):
        result = generate_slots(FRIDAY, [booking("a1", "10:00")])

        booked = [s.start for s in result.slots if s.is_booked]
        assert booked == ["10:00"]
        assert result.booked_slots == 1
        assert result.available_slots == 15

    def test_off_grid_booking_marks_overlapping_slots(self):
        """Test a 10:15 booking blocks both slots it overlaps."""
        result = generate_slots(FRIDAY, [booking("a1", "10:15")])

        booked = [s.start for s in result.slots if s.is_booked]
        assert booked == ["10:00", "10:30"]

    def test_slot_length_does_not_overrun_close(self):
        """Test slots that would end after closing time are dropped."""
        schedule = {"friday": DaySchedule("09:00", "10:00", slot_minutes=45)}

        result = generate_slots(FRIDAY, [], schedule=schedule)

        assert [(s.start, s.end) for s in result.slots] == [("09:00", "09:45")]

    def test_malformed_booking_time_ignored(self, caplog):
        """Test a booking with an unreadable time is skipped with a warning."""
        bookings = [booking("bad", "10:00:00"), booking("good", "11:00")]

        with caplog.at_level("WARNING"):
            result = generate_slots(FRIDAY, bookings)

        assert [s.start for s in result.slots if s.is_booked] == ["11:00"]
        assert "Ignoring appointment bad with malformed time '10:00:00'" in caplog.text

    def test_weekly_schedule_slot_length(self):
        """Test the slot length override keeps opening hours."""
        schedule = weekly_schedule(15)

        result = generate_slots(FRIDAY, [], schedule=schedule)

        assert result.total_slots == 32
        assert "sunday" not in schedule


class TestCheckConflict:
    """Test conflict detection for proposed appointments."""

    def test_overlapping_proposal(self):
        """Test a 10:15 proposal conflicts with a 10:00 booking."""
        result = check_conflict("10:15", [booking("a1", "10:00", patient_name="Asha")])

        assert result.has_conflict is True
        assert len(result.conflicts) == 1
        assert result.conflicts[0].appointment_id == "a1"
        assert result.conflicts[0].patient_name == "Asha"
        assert result.conflicts[0].time == "10:00"
        assert result.message == "Time slot conflicts with 1 existing appointment(s)"

    def test_no_bookings(self):
        result = check_conflict("10:15", [])

        assert result.has_conflict is False
        assert result.conflicts == []
        assert result.next_available_slot is None
        assert result.message == "No conflicts found. Time slot is available."

    def test_adjacent_booking_is_not_conflict(self):
        """Test a proposal starting when a booking ends is free."""
        assert not check_conflict("10:30", [booking("a1", "10:00")]).has_conflict

    def test_next_available_slot(self):
        """Test the next free start skips consecutive bookings."""
        bookings = [booking("a1", "09:00"), booking("a2", "09:30")]

        result = check_conflict("09:00", bookings)

        assert result.has_conflict is True
        assert result.next_available_slot == "10:00"

    def test_longer_duration(self):
        """Test a 60-minute proposal needs a free hour."""
        bookings = [booking("a1", "09:00"), booking("a2", "10:00")]

        result = check_conflict("09:00", bookings, duration=60)

        assert result.next_available_slot == "10:30"

    def test_fully_booked_day(self):
        """Test no next slot when every start in the search window is taken."""
        times = [f"{h:02d}:{m:02d}" for h in range(9, 17) for m in (0, 30)]
        bookings = [booking(f"a{i}", t) for i, t in enumerate(times)]

        result = check_conflict("09:00", bookings)

        assert result.has_conflict is True
        assert len(result.conflicts) == 1
        assert result.next_available_slot is None

    def test_malformed_booking_time_ignored(self):
        bookings = [booking("bad", "9am"), booking("a1", "10:00")]

        result = check_conflict("10:15", bookings)

        assert [c.appointment_id for c in result.conflicts] == ["a1"]
        assert result.next_available_slot == "09:00"

    def test_to_dict(self):
        result = check_conflict("10:15", [booking("a1", "10:00")]).to_dict()

        assert result["has_conflict"] is True
        assert result["conflicts"][0]["appointment_id"] == "a1"


class TestNextAvailableStart:
    """Test the free-start search."""

    def test_first_start_when_free(self):
        assert next_available_start(30, []) == "09:00"

    def test_custom_window(self):
        assert next_available_start(30, [booking("a1", "14:00")], "14:00", "15:00") == "14:30"


class TestAvailabilityService:
    """Test the store-backed service."""

    @pytest.fixture
    def store(self):
        return InMemoryAppointmentStore([
            booking("a1", "10:00"),
            booking("a2", "11:00", status=AppointmentStatus.CANCELLED),
            booking("a3", "12:00", doctor_id="doc-2"),
            booking("a4", "13:00", status=AppointmentStatus.NO_SHOW),
            booking("a5", "14:00", status=AppointmentStatus.COMPLETED),
        ])

    @pytest.fixture
    def service(self, store):
        return AvailabilityService(store)

    @pytest.mark.asyncio
    async def test_inactive_bookings_ignored(self, service):
        """Test cancelled and no-show bookings free their slot."""
        result = await service.get_availability("doc-1", FRIDAY)

        booked = [s.start for s in result.slots if s.is_booked]
        assert booked == ["10:00", "14:00"]

    @pytest.mark.asyncio
    async def test_other_doctors_ignored(self, service):
        result = await service.check_conflict("doc-1", FRIDAY, "12:00")

        assert result.has_conflict is False

    @pytest.mark.asyncio
    async def test_conflict(self, service):
        result = await service.check_conflict("doc-1", FRIDAY, "10:15")

        assert result.has_conflict is True
        assert result.next_available_slot == "09:00"

    @pytest.mark.asyncio
    async def test_exclude_appointment_for_reschedule(self, service):
        """Test a booking does not conflict with itself when moved."""
        result = await service.check_conflict(
            "doc-1", FRIDAY, "10:15", exclude_appointment_id="a1"
        )

        assert result.has_conflict is False
