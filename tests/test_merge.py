"""
Tests for multi-professional views: merged slots, timeline grid, auto-assign.
"""

import pytest

from barberslots.domain.conflict_detector import find_conflict
from barberslots.domain.exceptions import ContractViolation
from barberslots.domain.merge import build_timeline_grid, merge_availability, pick_professional
from barberslots.domain.models import (
    BookedInterval,
    ProfessionalAvailability,
    SlotState,
    WorkingHours,
)


def _hours(open_time, close_time, **kwargs):
    return WorkingHours(day_of_week=1, open_time=open_time, close_time=close_time, **kwargs)


def _availability(professional_id, hours, *intervals):
    return ProfessionalAvailability(
        professional_id=professional_id,
        working_hours=hours,
        booked_intervals=tuple(intervals),
    )


def _booked(start, end, appointment_id):
    return BookedInterval(start_minutes=start, end_minutes=end, appointment_id=appointment_id)


class TestMergeAvailability:
    """Tests for merge_availability."""

    def test_union_of_two_professionals(self):
        """Test that overlapping free slots appear once, sorted."""
        a = _availability("A", _hours("09:00", "10:00"))
        b = _availability("B", _hours("09:30", "10:30"))

        merged = merge_availability([b, a], 30)

        assert [slot.start_time for slot in merged] == ["09:00", "09:30", "10:00"]

    def test_slot_free_if_any_professional_is_free(self):
        """Test that a slot booked by one professional survives through another."""
        a = _availability("A", _hours("09:00", "10:00"), _booked(540, 570, 1))
        b = _availability("B", _hours("09:00", "10:00"), _booked(570, 600, 2))

        merged = merge_availability([a, b], 30)

        assert [slot.start_time for slot in merged] == ["09:00", "09:30"]

    def test_fully_booked_slot_disappears(self):
        a = _availability("A", _hours("09:00", "10:00"), _booked(540, 570, 1))
        b = _availability("B", _hours("09:00", "10:00"), BookedInterval.block(540, 570))

        merged = merge_availability([a, b], 30)

        assert [slot.start_time for slot in merged] == ["09:30"]

    def test_slot_running_into_break_is_not_offered(self):
        """Test that the detector removes generated slots overlapping the break."""
        a = _availability("A", _hours("09:00", "11:00", break_start="09:45", break_end="10:00"))

        merged = merge_availability([a], 30)

        assert [slot.start_time for slot in merged] == ["09:00", "10:00", "10:30"]

    def test_no_professionals(self):
        assert merge_availability([], 30) == []

    def test_everyone_closed(self):
        closed = _availability("A", WorkingHours.closed_on(1))

        assert merge_availability([closed], 30) == []

    def test_non_positive_duration_is_rejected(self):
        with pytest.raises(ContractViolation):
            merge_availability([], 0)


class TestTimelineGrid:
    """Tests for build_timeline_grid."""

    @pytest.fixture
    def rows(self):
        first = _availability(
            1,
            _hours("09:00", "11:00", break_start="10:00", break_end="10:30"),
            _booked(540, 600, 5),
        )
        second = _availability(2, _hours("10:00", "11:00"))
        closed = _availability(3, WorkingHours.closed_on(1))

        return build_timeline_grid([first, second, closed], 30)

    def test_rows_are_union_of_start_times(self, rows):
        assert [row.slot.start_time for row in rows] == ["09:00", "09:30", "10:00", "10:30"]

    def test_one_cell_per_professional_in_input_order(self, rows):
        for row in rows:
            assert [cell.professional_id for cell in row.cells] == [1, 2, 3]

    def test_cell_states(self, rows):
        states = {
            row.slot.start_time: tuple(cell.state for cell in row.cells)
            for row in rows
        }

        assert states["09:00"] == (SlotState.OCCUPIED, SlotState.OUTSIDE_WORKING_HOURS, SlotState.CLOSED)
        assert states["09:30"] == (SlotState.OCCUPIED, SlotState.OUTSIDE_WORKING_HOURS, SlotState.CLOSED)
        assert states["10:00"] == (SlotState.BREAK, SlotState.AVAILABLE, SlotState.CLOSED)
        assert states["10:30"] == (SlotState.AVAILABLE, SlotState.AVAILABLE, SlotState.CLOSED)

    def test_long_appointment_listed_on_every_row_it_covers(self, rows):
        assert rows[0].cell_for(1).appointment_ids == (5,)
        assert rows[1].cell_for(1).appointment_ids == (5,)
        assert rows[2].cell_for(1).appointment_ids == ()

    def test_unknown_professional_has_no_cell(self, rows):
        assert rows[0].cell_for(99) is None

    def test_cells_agree_with_conflict_detector_across_mismatched_hours(self):
        """Test that another professional's rows are judged on the whole window."""
        full = _availability("A", _hours("09:00", "12:00"))
        short = _availability("B", _hours("09:00", "11:45", break_start="10:15", break_end="10:45"))

        rows = build_timeline_grid([full, short], 30)
        states = {row.slot.start_time: row.cell_for("B").state for row in rows}

        assert states["10:00"] is SlotState.BREAK
        assert states["10:30"] is SlotState.BREAK
        assert states["10:45"] is SlotState.AVAILABLE
        assert states["11:30"] is SlotState.OUTSIDE_WORKING_HOURS

        for row in rows:
            for availability in (full, short):
                cell = row.cell_for(availability.professional_id)
                free = find_conflict(
                    availability.working_hours,
                    availability.booked_intervals,
                    row.slot.start_minutes,
                    row.slot.duration_minutes(),
                ) is None
                assert (cell.state is SlotState.AVAILABLE) == free


class TestPickProfessional:
    """Tests for auto-assignment."""

    def test_fewest_appointments_wins(self):
        busy = _availability("A", _hours("09:00", "18:00"), _booked(540, 570, 1), _booked(600, 630, 2))
        light = _availability("B", _hours("09:00", "18:00"), _booked(660, 690, 3))
        taken = _availability("C", _hours("09:00", "18:00"), _booked(720, 750, 4))

        assert pick_professional([busy, light, taken], "12:00", 30) == "B"

    def test_blocks_do_not_count_as_appointments(self):
        blocked = _availability("A", _hours("09:00", "18:00"), BookedInterval.block(540, 600))
        booked = _availability("B", _hours("09:00", "18:00"), _booked(540, 570, 1))

        assert pick_professional([booked, blocked], "14:00", 30) == "A"

    def test_tie_goes_to_first_listed(self):
        first = _availability("A", _hours("09:00", "18:00"))
        second = _availability("B", _hours("09:00", "18:00"))

        assert pick_professional([first, second], "10:00", 30) == "A"
        assert pick_professional([second, first], "10:00", 30) == "B"

    def test_nobody_free(self):
        a = _availability("A", _hours("09:00", "12:00"))

        assert pick_professional([a], "12:00", 30) is None
