"""
Conflict detection for candidate booking windows.

Every overlap in the package goes through ``intervals_overlap``: two
half-open intervals [a, b) and [c, d) overlap iff a < d and c < b. Windows
that merely touch (one ends where the other starts) do not conflict.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from .clock import MINUTES_PER_DAY, TimeOfDay, to_minutes
from .exceptions import ContractViolation
from .models import (
    BookedInterval,
    ConflictReason,
    EntityId,
    ProfessionalAvailability,
    TimeSlot,
    WorkingHours,
)
from .slot_generator import generate_slots, require_positive_duration

logger = logging.getLogger(__name__)


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval intersection test."""
    return start_a < end_b and start_b < end_a


def candidate_window(candidate_start: TimeOfDay, duration_minutes: int) -> Tuple[int, int]:
    """
    Resolve a candidate start and duration to minutes-of-day.

    Raises:
        ContractViolation: if the duration is not positive or the window
            would run past midnight
    """
    require_positive_duration(duration_minutes, "duration_minutes")

    start = to_minutes(candidate_start)
    end = start + duration_minutes

    if start >= MINUTES_PER_DAY or end > MINUTES_PER_DAY:
        raise ContractViolation(
            f"Candidate window starting at {candidate_start} for {duration_minutes} minutes crosses midnight"
        )

    return start, end


def overlapping_intervals(
    booked_intervals: Iterable[BookedInterval],
    start: int,
    end: int,
    exclude_appointment_id: Optional[EntityId] = None,
) -> List[BookedInterval]:
    """
    Booked intervals that intersect [start, end).

    An interval matching ``exclude_appointment_id`` is skipped; blocking
    periods are never skipped.
    """
    hits: List[BookedInterval] = []

    for interval in booked_intervals:
        if (
            exclude_appointment_id is not None
            and not interval.is_block
            and interval.appointment_id == exclude_appointment_id
        ):
            continue

        if intervals_overlap(start, end, interval.start_minutes, interval.end_minutes):
            hits.append(interval)

    return hits


def find_conflict(
    working_hours: WorkingHours,
    booked_intervals: Iterable[BookedInterval],
    candidate_start: TimeOfDay,
    duration_minutes: int,
    exclude_appointment_id: Optional[EntityId] = None,
) -> ConflictReason | None:
    """
    Return the first reason the candidate window cannot be booked.

    Checks run in this order: closed day, working hours, break, existing
    bookings. Returns None when the window is free.
    """
    start, end = candidate_window(candidate_start, duration_minutes)

    bounds = working_hours.bounds()
    if bounds is None:
        return ConflictReason.CLOSED_DAY

    if not bounds.contains(start, end):
        return ConflictReason.OUTSIDE_WORKING_HOURS

    if bounds.overlaps_break(start, end):
        return ConflictReason.DURING_BREAK

    hits = overlapping_intervals(booked_intervals, start, end, exclude_appointment_id)
    if hits:
        logger.debug("Window %s-%s overlaps %s", start, end, ", ".join(str(hit) for hit in hits))
        return ConflictReason.OVERLAPS_EXISTING

    return None


def is_slot_available(
    working_hours: WorkingHours,
    booked_intervals: Iterable[BookedInterval],
    candidate_start: TimeOfDay,
    duration_minutes: int,
    exclude_appointment_id: Optional[EntityId] = None,
) -> bool:
    """
    Check whether a window of ``duration_minutes`` starting at
    ``candidate_start`` can be booked.

    Args:
        working_hours: The professional's hours for the day
        booked_intervals: Appointments and blocking periods on the day
        candidate_start: "HH:MM" or minutes-of-day
        duration_minutes: Length of the window
        exclude_appointment_id: Appointment to ignore, used when an
            appointment is checked against its own current placement

    Returns:
        True only when every constraint passes
    """
    return find_conflict(
        working_hours,
        booked_intervals,
        candidate_start,
        duration_minutes,
        exclude_appointment_id,
    ) is None


def bookable_slots(
    availability: ProfessionalAvailability,
    service_duration_minutes: int,
    slot_duration_minutes: int,
) -> List[TimeSlot]:
    """
    Start times on the slot grid where the whole service fits.

    The grid comes from the working hours at ``slot_duration_minutes``; each
    returned slot spans the service duration, not the grid step.
    """
    require_positive_duration(service_duration_minutes, "service_duration_minutes")

    result: List[TimeSlot] = []

    for grid_slot in generate_slots(availability.working_hours, slot_duration_minutes):
        start = grid_slot.start_minutes
        end = start + service_duration_minutes

        if end > MINUTES_PER_DAY:
            break

        if is_slot_available(
            availability.working_hours,
            availability.booked_intervals,
            start,
            service_duration_minutes,
        ):
            result.append(TimeSlot.from_minutes(start, end))

    return result
