"""
Tests for conflict detection.
"""

import pytest

from barberslots.domain.conflict_detector import (
    bookable_slots,
    find_conflict,
    intervals_overlap,
    is_slot_available,
)
from barberslots.domain.exceptions import ContractViolation
from barberslots.domain.models import (
    BookedInterval,
    ConflictReason,
    ProfessionalAvailability,
    WorkingHours,
)

FULL_DAY = WorkingHours(
    day_of_week=1,
    open_time="09:00",
    close_time="18:00",
    break_start="12:00",
    break_end="13:00",
)


def _appointment(start, end, appointment_id=1):
    return BookedInterval(start_minutes=start, end_minutes=end, appointment_id=appointment_id)


class TestIntervalsOverlap:
    """Tests for the half-open overlap test."""

    def test_touching_intervals_do_not_overlap(self):
        assert not intervals_overlap(540, 570, 570, 600)
        assert not intervals_overlap(570, 600, 540, 570)

    def test_contained_interval_overlaps(self):
        assert intervals_overlap(540, 600, 550, 560)

    def test_partial_overlap(self):
        assert intervals_overlap(540, 600, 590, 620)

    def test_empty_booked_interval_is_rejected(self):
        """Test that a zero-length booking cannot be built, so it never blocks a window."""
        with pytest.raises(ContractViolation):
            BookedInterval(start_minutes=560, end_minutes=560, appointment_id=1)

        with pytest.raises(ContractViolation):
            BookedInterval.block(560, 560)


class TestIsSlotAvailable:
    """Tests for is_slot_available."""

    def test_booked_start_is_unavailable(self):
        """Test that the slot of an 11:00-11:30 appointment is taken."""
        booked = [_appointment(660, 690)]

        assert not is_slot_available(FULL_DAY, booked, "11:00", 30)

    def test_adjacent_slot_is_available(self):
        """Test that the slot right after an appointment is free."""
        booked = [_appointment(660, 690)]

        assert is_slot_available(FULL_DAY, booked, "11:30", 30)
        assert is_slot_available(FULL_DAY, booked, "10:30", 30)

    def test_exact_interval_is_unavailable(self):
        """Test that a window identical to a booking conflicts."""
        booked = [_appointment(600, 645)]

        assert not is_slot_available(FULL_DAY, booked, 600, 45)

    def test_excluded_appointment_does_not_conflict(self):
        """Test that an appointment can be checked against its own placement."""
        booked = [_appointment(600, 645, appointment_id=42)]

        assert is_slot_available(FULL_DAY, booked, "10:00", 45, exclude_appointment_id=42)
        assert not is_slot_available(FULL_DAY, booked, "10:00", 45, exclude_appointment_id=41)

    def test_blocks_cannot_be_excluded(self):
        """Test that blocking periods always conflict."""
        booked = [BookedInterval.block(600, 660)]

        assert not is_slot_available(FULL_DAY, booked, "10:30", 30, exclude_appointment_id=None)
        assert not is_slot_available(FULL_DAY, booked, "10:30", 30, exclude_appointment_id="anything")

    def test_window_must_fit_working_hours(self):
        """Test the window edges against opening and closing time."""
        assert is_slot_available(FULL_DAY, [], "09:00", 30)
        assert is_slot_available(FULL_DAY, [], "17:30", 30)
        assert not is_slot_available(FULL_DAY, [], "08:30", 30)
        assert not is_slot_available(FULL_DAY, [], "17:45", 30)

    def test_window_must_avoid_break(self):
        """Test windows touching and crossing the break."""
        assert is_slot_available(FULL_DAY, [], "11:30", 30)
        assert is_slot_available(FULL_DAY, [], "13:00", 30)
        assert not is_slot_available(FULL_DAY, [], "11:45", 30)
        assert not is_slot_available(FULL_DAY, [], "12:30", 30)

    def test_closed_day(self):
        """Test that nothing is available on a closed day."""
        assert not is_slot_available(WorkingHours.closed_on(0), [], "10:00", 30)

    @pytest.mark.parametrize("duration", [0, -15])
    def test_non_positive_duration_is_rejected(self, duration):
        with pytest.raises(ContractViolation):
            is_slot_available(FULL_DAY, [], "10:00", duration)

    def test_window_past_midnight_is_rejected(self):
        with pytest.raises(ContractViolation):
            is_slot_available(FULL_DAY, [], "23:45", 30)


class TestFindConflict:
    """Tests for the reported conflict reason."""

    def test_free_window_has_no_reason(self):
        assert find_conflict(FULL_DAY, [], "10:00", 30) is None

    def test_reasons(self):
        booked = [_appointment(600, 630)]

        assert find_conflict(WorkingHours.closed_on(0), booked, "10:00", 30) is ConflictReason.CLOSED_DAY
        assert find_conflict(FULL_DAY, booked, "17:45", 30) is ConflictReason.OUTSIDE_WORKING_HOURS
        assert find_conflict(FULL_DAY, booked, "11:45", 30) is ConflictReason.DURING_BREAK
        assert find_conflict(FULL_DAY, booked, "10:15", 30) is ConflictReason.OVERLAPS_EXISTING

    def test_working_hours_checked_before_bookings(self):
        """Test that the first failing check is the one reported."""
        booked = [_appointment(1050, 1080)]

        assert find_conflict(FULL_DAY, booked, "17:30", 60) is ConflictReason.OUTSIDE_WORKING_HOURS


class TestBookableSlots:
    """Tests for per-professional bookable slots."""

    def test_service_longer_than_grid_step(self):
        """Test that the whole service must fit before the next booking."""
        hours = WorkingHours(day_of_week=1, open_time="09:00", close_time="11:15")
        availability = ProfessionalAvailability(
            professional_id=1,
            working_hours=hours,
            booked_intervals=(_appointment(600, 630),),
        )

        slots = bookable_slots(availability, service_duration_minutes=45, slot_duration_minutes=15)

        assert [slot.start_time for slot in slots] == ["09:00", "09:15", "10:30"]
        assert all(slot.duration_minutes() == 45 for slot in slots)

    def test_block_removes_slots(self):
        """Test that a blocking period removes its slots."""
        availability = ProfessionalAvailability(
            professional_id=1,
            working_hours=FULL_DAY,
            booked_intervals=(BookedInterval.block(540, 720),),
        )

        slots = bookable_slots(availability, 30, 30)

        assert slots[0].start_time == "13:00"

    def test_break_overlap_removed(self):
        """Test that a grid start before the break is dropped when the service runs into it."""
        availability = ProfessionalAvailability(professional_id=1, working_hours=FULL_DAY)

        starts = [slot.start_time for slot in bookable_slots(availability, 60, 30)]

        assert "11:00" in starts
        assert "11:30" not in starts
        assert "17:00" in starts
        assert "17:30" not in starts
