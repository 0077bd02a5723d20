"""
Wall-clock helpers.

The engine computes on minutes-of-day: an integer offset from local midnight
in the business timezone. Working hours arrive as "HH:MM" strings, concrete
appointments as ISO-8601 instants. Both are projected onto a single calendar
day; anything that does not fit in that day is clipped or rejected, so the
projection is lossy by construction.
"""

import logging
import re
from datetime import date
from typing import NamedTuple, Union

import pendulum
from pendulum import DateTime

from .exceptions import ContractViolation

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")

TimeOfDay = Union[str, int]


class Projection(NamedTuple):
    """An instant pair projected onto one day, in minutes-of-day."""
    start: int
    end: int
    clipped: bool


def parse_hhmm(value: str) -> int:
    """
    Convert a wall-clock "HH:MM" string to minutes-of-day.

    "24:00" is accepted as the end of the day. A trailing ":SS" part, as sent
    by some database drivers for TIME columns, is ignored.
    """
    match = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ContractViolation(f"Invalid time of day {value!r}, expected HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise ContractViolation(f"Invalid time of day {value!r}, expected HH:MM")

    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Format minutes-of-day as "HH:MM"."""
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ContractViolation(f"Minutes-of-day {minutes} outside a single day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def to_minutes(value: TimeOfDay) -> int:
    """Accept either an "HH:MM" string or an int and return minutes-of-day."""
    if isinstance(value, bool):
        raise ContractViolation(f"Invalid time of day {value!r}")
    if isinstance(value, int):
        if not 0 <= value <= MINUTES_PER_DAY:
            raise ContractViolation(f"Minutes-of-day {value} outside a single day")
        return value
    return parse_hhmm(value)


def parse_instant(value: str, timezone: str) -> DateTime:
    """Parse an ISO-8601 string into the business timezone."""
    try:
        parsed = pendulum.parse(value, tz=timezone)
    except ValueError as exc:
        raise ContractViolation(f"Invalid ISO-8601 instant {value!r}: {exc}") from exc

    if not isinstance(parsed, DateTime):
        raise ContractViolation(f"Expected a date-time, got {value!r}")

    return parsed.in_timezone(timezone)


def minutes_of_day(value: str, timezone: str) -> int:
    """Wall-clock minutes-of-day of an ISO-8601 instant; seconds are dropped."""
    instant = parse_instant(value, timezone)
    return instant.hour * 60 + instant.minute


def start_of_day(day: date, timezone: str) -> DateTime:
    """Local midnight of ``day`` in ``timezone``."""
    return pendulum.datetime(day.year, day.month, day.day, tz=timezone)


def project_interval(start: str, end: str, day: date, timezone: str) -> Projection | None:
    """
    Project an ISO-8601 instant pair onto ``day``.

    Parts before local midnight are clipped to 00:00 and parts after the next
    midnight to 24:00. Returns None when nothing of the interval is on ``day``.
    """
    start_dt = parse_instant(start, timezone)
    end_dt = parse_instant(end, timezone)

    if end_dt < start_dt:
        raise ContractViolation(f"Interval ends before it starts: {start} - {end}")

    day_start = start_of_day(day, timezone)
    day_end = day_start.add(days=1)

    if end_dt <= day_start or start_dt >= day_end:
        return None

    clipped = False

    if start_dt < day_start:
        start_minutes = 0
        clipped = True
    else:
        start_minutes = start_dt.hour * 60 + start_dt.minute

    if end_dt >= day_end:
        end_minutes = MINUTES_PER_DAY
        clipped = True
    else:
        end_minutes = end_dt.hour * 60 + end_dt.minute

    # Wall-clock arithmetic across a DST fold can invert the pair.
    if end_minutes <= start_minutes:
        logger.debug("Dropping empty projection of %s - %s on %s", start, end, day)
        return None

    return Projection(start=start_minutes, end=end_minutes, clipped=clipped)


def instant_at(day: date, minutes: int, timezone: str) -> DateTime:
    """The wall-clock instant ``minutes`` past local midnight of ``day``."""
    to_minutes(minutes)
    if minutes == MINUTES_PER_DAY:
        return start_of_day(day, timezone).add(days=1)

    hour, minute = divmod(minutes, 60)
    return pendulum.datetime(day.year, day.month, day.day, hour, minute, tz=timezone)


def weekday_index(day: date) -> int:
    """Weekday with 0 = Sunday .. 6 = Saturday, the working-hours convention."""
    return day.isoweekday() % 7


def format_duration(minutes: int) -> str:
    """
    Human readable duration.

    Example: 45 -> "45 minutes", 60 -> "1h", 90 -> "1h 30m"
    """
    if minutes < 0:
        raise ContractViolation(f"Duration must not be negative, got {minutes}")

    if minutes < 60:
        return f"{minutes} minutes"

    hours, rest = divmod(minutes, 60)
    if rest == 0:
        return f"{hours}h"

    return f"{hours}h {rest}m"
