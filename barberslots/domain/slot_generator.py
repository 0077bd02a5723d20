"""
Slot generation from working hours.

Pure functions: no clock reads, no I/O. Anything date-relative takes an
explicit reference date or instant.
"""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Sequence

from pendulum import DateTime

from .clock import weekday_index
from .exceptions import ContractViolation
from .models import TimeSlot, WorkingHours

logger = logging.getLogger(__name__)


def require_positive_duration(minutes: int, name: str = "slot_duration_minutes") -> None:
    """Fail fast on durations that can only come from a caller bug."""
    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
        raise ContractViolation(f"{name} must be a positive integer, got {minutes!r}")


def generate_slots(working_hours: WorkingHours, slot_duration_minutes: int) -> List[TimeSlot]:
    """
    Generate the ordered slots of one day.

    Algorithm:
    1. Start at opening time
    2. A cursor inside the break jumps to the end of the break
    3. A window is emitted only if it ends at or before closing time
    4. Advance by the slot duration

    Example (09:00-12:00, break 10:00-10:30, 30 minutes):
    09:00, 09:30, 10:30, 11:00, 11:30

    A closed or incompletely configured day yields no slots.
    """
    require_positive_duration(slot_duration_minutes)

    bounds = working_hours.bounds()
    if bounds is None:
        return []

    slots: List[TimeSlot] = []
    cursor = bounds.open

    while cursor < bounds.close:
        if bounds.in_break(cursor):
            logger.debug("Cursor %s inside break, resuming at %s", cursor, bounds.break_end)
            cursor = bounds.break_end
            continue

        slot_end = cursor + slot_duration_minutes

        # Dropped, not truncated
        if slot_end <= bounds.close:
            slots.append(TimeSlot.from_minutes(cursor, slot_end))

        cursor += slot_duration_minutes

    return slots


def drop_past_slots(
    slots: Iterable[TimeSlot],
    day: date,
    now: DateTime,
    timezone: str,
) -> List[TimeSlot]:
    """
    Remove slots that already started relative to the reference instant.

    For a past day nothing is bookable, for a future day everything is.
    """
    local_now = now.in_timezone(timezone)
    today = local_now.date()

    if day < today:
        return []

    if day > today:
        return list(slots)

    cutoff = local_now.hour * 60 + local_now.minute
    return [slot for slot in slots if slot.start_minutes >= cutoff]


def available_dates(
    weekly_hours: Sequence[WorkingHours],
    reference_date: date,
    horizon_days: int = 30,
) -> List[date]:
    """
    List the open dates after ``reference_date`` within the booking horizon.

    The reference date itself is excluded; the horizon is inclusive.
    """
    require_positive_duration(horizon_days, "horizon_days")

    by_weekday: Dict[int, WorkingHours] = {}
    for hours in weekly_hours:
        by_weekday[hours.day_of_week] = hours

    dates: List[date] = []

    for offset in range(1, horizon_days + 1):
        candidate = reference_date + timedelta(days=offset)
        hours = by_weekday.get(weekday_index(candidate))

        if hours is not None and hours.is_open():
            dates.append(candidate)

    return dates
