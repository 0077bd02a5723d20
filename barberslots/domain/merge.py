"""
Multi-professional views of a day.

``merge_availability`` answers "is some professional free at this time";
``build_timeline_grid`` lays every professional out on the same rows so the
dashboard columns align.
"""

import logging
from typing import Dict, List, Optional, Sequence

from .conflict_detector import find_conflict, intervals_overlap, is_slot_available
from .clock import TimeOfDay
from .models import (
    ConflictReason,
    EntityId,
    ProfessionalAvailability,
    SlotState,
    TimelineCell,
    TimelineRow,
    TimeSlot,
)
from .slot_generator import generate_slots, require_positive_duration

logger = logging.getLogger(__name__)


def _union_by_start(slots_per_professional: Sequence[List[TimeSlot]]) -> List[TimeSlot]:
    """Keep the first slot seen for every distinct start time, sorted."""
    by_start: Dict[int, TimeSlot] = {}

    for slots in slots_per_professional:
        for slot in slots:
            by_start.setdefault(slot.start_minutes, slot)

    return [by_start[start] for start in sorted(by_start)]


def merge_availability(
    professional_availabilities: Sequence[ProfessionalAvailability],
    slot_duration_minutes: int,
) -> List[TimeSlot]:
    """
    Union of the open slots of all professionals.

    Algorithm:
    1. Generate each professional's slots from their working hours
    2. Keep the slots that pass the conflict detector against that
       professional's own bookings
    3. Union the survivors, one slot per distinct start time, ascending

    Example: A free at {09:00, 09:30}, B free at {09:30, 10:00}
    -> {09:00, 09:30, 10:00}
    """
    require_positive_duration(slot_duration_minutes)

    free_per_professional: List[List[TimeSlot]] = []

    for availability in professional_availabilities:
        free = [
            slot
            for slot in generate_slots(availability.working_hours, slot_duration_minutes)
            if is_slot_available(
                availability.working_hours,
                availability.booked_intervals,
                slot.start_minutes,
                slot_duration_minutes,
            )
        ]
        logger.debug("Professional %s has %d free slots", availability.professional_id, len(free))
        free_per_professional.append(free)

    return _union_by_start(free_per_professional)


def timeline_slots(
    professional_availabilities: Sequence[ProfessionalAvailability],
    slot_duration_minutes: int,
) -> List[TimeSlot]:
    """Union of every professional's generated slots, booked or not."""
    require_positive_duration(slot_duration_minutes)

    return _union_by_start([
        generate_slots(availability.working_hours, slot_duration_minutes)
        for availability in professional_availabilities
    ])


_STATE_FOR_REASON = {
    None: SlotState.AVAILABLE,
    ConflictReason.CLOSED_DAY: SlotState.CLOSED,
    ConflictReason.OUTSIDE_WORKING_HOURS: SlotState.OUTSIDE_WORKING_HOURS,
    ConflictReason.DURING_BREAK: SlotState.BREAK,
    ConflictReason.OVERLAPS_EXISTING: SlotState.OCCUPIED,
}


def _cell_for(availability: ProfessionalAvailability, slot: TimeSlot) -> TimelineCell:
    """A cell is available exactly when the slot's window passes the conflict detector."""
    reason = find_conflict(
        availability.working_hours,
        availability.booked_intervals,
        slot.start_minutes,
        slot.duration_minutes(),
    )

    appointment_ids = tuple(
        interval.appointment_id
        for interval in availability.booked_intervals
        if not interval.is_block
        and intervals_overlap(slot.start_minutes, slot.end_minutes, interval.start_minutes, interval.end_minutes)
    )

    return TimelineCell(
        professional_id=availability.professional_id,
        state=_STATE_FOR_REASON[reason],
        appointment_ids=appointment_ids,
    )


def build_timeline_grid(
    professional_availabilities: Sequence[ProfessionalAvailability],
    slot_duration_minutes: int,
) -> List[TimelineRow]:
    """
    Build the rows of the timeline grid.

    Rows are the union of all professionals' slot start times; each row has
    one cell per professional, in input order. Appointments that overlap a
    cell are listed on it even when they started in an earlier row.
    """
    rows = timeline_slots(professional_availabilities, slot_duration_minutes)

    return [
        TimelineRow(
            slot=slot,
            cells=tuple(_cell_for(availability, slot) for availability in professional_availabilities),
        )
        for slot in rows
    ]


def pick_professional(
    professional_availabilities: Sequence[ProfessionalAvailability],
    candidate_start: TimeOfDay,
    duration_minutes: int,
) -> Optional[EntityId]:
    """
    Auto-assign a professional: the free one with the fewest appointments.

    Ties go to the professional listed first. Returns None when nobody can
    take the window.
    """
    best: Optional[ProfessionalAvailability] = None

    for availability in professional_availabilities:
        if not is_slot_available(
            availability.working_hours,
            availability.booked_intervals,
            candidate_start,
            duration_minutes,
        ):
            continue

        if best is None or availability.appointment_count() < best.appointment_count():
            best = availability

    if best is None:
        logger.debug("No professional free at %s for %s minutes", candidate_start, duration_minutes)
        return None

    return best.professional_id
