"""
Domain models for working hours, slots and booked intervals.

All models are immutable value objects. Times are minutes-of-day in the
business timezone (see ``clock``).
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .clock import MINUTES_PER_DAY, format_minutes, instant_at, parse_hhmm
from .exceptions import ContractViolation

logger = logging.getLogger(__name__)

EntityId = Union[int, str]


class AppointmentStatus(str, Enum):
    """Lifecycle status of an appointment."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: str) -> "AppointmentStatus":
        """Accept the English and Portuguese spellings used by the API."""
        aliases = {
            "pending": cls.PENDING,
            "pendente": cls.PENDING,
            "confirmed": cls.CONFIRMED,
            "confirmado": cls.CONFIRMED,
            "cancelled": cls.CANCELLED,
            "canceled": cls.CANCELLED,
            "cancelado": cls.CANCELLED,
        }
        try:
            return aliases[value.strip().lower()]
        except KeyError:
            raise ValueError(f"Unknown appointment status: {value!r}") from None


class IntervalKind(str, Enum):
    """What occupies a booked interval."""
    APPOINTMENT = "appointment"
    BLOCK = "block"


class ConflictReason(str, Enum):
    """Why a candidate window cannot be booked."""
    OUTSIDE_WORKING_HOURS = "OUTSIDE_WORKING_HOURS"
    DURING_BREAK = "DURING_BREAK"
    OVERLAPS_EXISTING = "OVERLAPS_EXISTING"
    CLOSED_DAY = "CLOSED_DAY"


class SlotState(str, Enum):
    """State of one professional's cell in the timeline grid."""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    BREAK = "break"
    OUTSIDE_WORKING_HOURS = "outside_working_hours"
    CLOSED = "closed"


@dataclass(frozen=True)
class DayBounds:
    """
    Validated working hours of one day in minutes-of-day.

    Invariant: open < close, and a break, when present, satisfies
    open <= break_start < break_end <= close.
    """
    open: int
    close: int
    break_start: Optional[int] = None
    break_end: Optional[int] = None

    @property
    def has_break(self) -> bool:
        return self.break_start is not None and self.break_end is not None

    def in_break(self, minute: int) -> bool:
        """Check if a minute falls inside [break_start, break_end)."""
        return self.has_break and self.break_start <= minute < self.break_end

    def overlaps_break(self, start: int, end: int) -> bool:
        return self.has_break and start < self.break_end and self.break_start < end

    def contains(self, start: int, end: int) -> bool:
        return self.open <= start and end <= self.close


@dataclass(frozen=True)
class WorkingHours:
    """
    One professional's schedule for one weekday.

    ``day_of_week`` uses 0 = Sunday .. 6 = Saturday. Incomplete or
    inconsistent hours are not an error: ``bounds()`` reports the day as
    closed so a rendering pass never fails on partial data.
    """
    day_of_week: int
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    break_start: Optional[str] = None
    break_end: Optional[str] = None
    closed: bool = False

    def __post_init__(self):
        if not 0 <= self.day_of_week <= 6:
            raise ContractViolation(f"day_of_week must be between 0 and 6, got {self.day_of_week}")

        for value in (self.open_time, self.close_time, self.break_start, self.break_end):
            if value is not None:
                parse_hhmm(value)

    @classmethod
    def closed_on(cls, day_of_week: int) -> "WorkingHours":
        return cls(day_of_week=day_of_week, closed=True)

    def bounds(self) -> DayBounds | None:
        """
        Resolve the day to minutes-of-day.

        Returns None if the day is closed or its configuration is incomplete.
        """
        if self.closed:
            return None

        if not self.open_time or not self.close_time:
            logger.debug("Working hours for day %s lack open/close time, treating as closed", self.day_of_week)
            return None

        open_minutes = parse_hhmm(self.open_time)
        close_minutes = parse_hhmm(self.close_time)

        if open_minutes >= close_minutes:
            logger.debug("Working hours for day %s open at or after closing, treating as closed", self.day_of_week)
            return None

        if self.break_start is None and self.break_end is None:
            return DayBounds(open=open_minutes, close=close_minutes)

        if self.break_start is None or self.break_end is None:
            logger.debug("Working hours for day %s have half a break, treating as closed", self.day_of_week)
            return None

        break_start = parse_hhmm(self.break_start)
        break_end = parse_hhmm(self.break_end)

        if not open_minutes <= break_start < break_end <= close_minutes:
            logger.debug("Break for day %s is empty or outside opening hours, treating as closed", self.day_of_week)
            return None

        return DayBounds(
            open=open_minutes,
            close=close_minutes,
            break_start=break_start,
            break_end=break_end,
        )

    def is_open(self) -> bool:
        return self.bounds() is not None


@dataclass(frozen=True)
class TimeSlot:
    """
    A candidate or confirmed booking window on one day.
    """
    start_time: str
    end_time: str
    start_minutes: int
    end_minutes: int

    @classmethod
    def from_minutes(cls, start: int, end: int) -> "TimeSlot":
        if not 0 <= start < end <= MINUTES_PER_DAY:
            raise ContractViolation(f"Slot {start}-{end} is not a window inside one day")
        return cls(
            start_time=format_minutes(start),
            end_time=format_minutes(end),
            start_minutes=start,
            end_minutes=end,
        )

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end_minutes - self.start_minutes

    def __str__(self) -> str:
        return f"{self.start_time} - {self.end_time}"


@dataclass(frozen=True)
class BookedInterval:
    """
    An existing appointment or blocking period projected onto one day.

    Blocking periods carry no appointment id and can never be excluded from
    a conflict check.
    """
    start_minutes: int
    end_minutes: int
    appointment_id: Optional[EntityId] = None
    professional_id: Optional[EntityId] = None
    kind: IntervalKind = IntervalKind.APPOINTMENT

    def __post_init__(self):
        if self.start_minutes < 0 or self.end_minutes > MINUTES_PER_DAY:
            raise ContractViolation(
                f"Interval {self.start_minutes}-{self.end_minutes} crosses midnight"
            )
        if self.end_minutes <= self.start_minutes:
            raise ContractViolation(
                f"Interval is empty or ends before it starts: {self.start_minutes}-{self.end_minutes}"
            )

    @classmethod
    def block(
        cls,
        start_minutes: int,
        end_minutes: int,
        professional_id: Optional[EntityId] = None,
    ) -> "BookedInterval":
        return cls(
            start_minutes=start_minutes,
            end_minutes=end_minutes,
            professional_id=professional_id,
            kind=IntervalKind.BLOCK,
        )

    @property
    def is_block(self) -> bool:
        return self.kind is IntervalKind.BLOCK

    def __str__(self) -> str:
        return f"{format_minutes(self.start_minutes)} - {format_minutes(self.end_minutes)}"


@dataclass(frozen=True)
class Appointment:
    """
    An appointment as the engine needs it: where it sits today and how long
    its service takes.
    """
    id: EntityId
    professional_id: EntityId
    start_minutes: int
    end_minutes: int
    service_duration_minutes: int
    status: AppointmentStatus = AppointmentStatus.CONFIRMED

    def __post_init__(self):
        if self.service_duration_minutes <= 0:
            raise ContractViolation(
                f"Service duration must be positive, got {self.service_duration_minutes}"
            )

    def blocks_time(self) -> bool:
        """Cancelled appointments free their slot."""
        return self.status is not AppointmentStatus.CANCELLED

    def as_booked_interval(self) -> BookedInterval:
        return BookedInterval(
            start_minutes=self.start_minutes,
            end_minutes=self.end_minutes,
            appointment_id=self.id,
            professional_id=self.professional_id,
        )


@dataclass(frozen=True)
class ProfessionalAvailability:
    """
    Aggregate input for one professional on one day.

    ``booked_intervals`` is stored as a tuple sorted by start time.
    """
    professional_id: EntityId
    working_hours: WorkingHours
    booked_intervals: Tuple[BookedInterval, ...] = field(default_factory=tuple)

    def __post_init__(self):
        ordered = tuple(sorted(self.booked_intervals, key=lambda i: (i.start_minutes, i.end_minutes)))
        object.__setattr__(self, "booked_intervals", ordered)

    def appointment_count(self) -> int:
        """Number of appointments (not blocking periods) on the day."""
        return sum(1 for interval in self.booked_intervals if not interval.is_block)


@dataclass(frozen=True)
class RescheduleResult:
    """
    Outcome of validating a move of an appointment.

    Exactly one of ``slot`` and ``reason`` is set.
    """
    appointment_id: EntityId
    professional_id: EntityId
    slot: Optional[TimeSlot] = None
    reason: Optional[ConflictReason] = None

    def __post_init__(self):
        if (self.slot is None) == (self.reason is None):
            raise ContractViolation("RescheduleResult needs either a slot or a reason")

    @property
    def ok(self) -> bool:
        return self.slot is not None

    def to_update_payload(self, day: date, timezone: str) -> Dict[str, object]:
        """
        Build the body of the appointment update call.

        Example: {"professionalId": 2, "startDate": "...", "endDate": "..."}
        """
        if self.slot is None:
            raise ContractViolation(f"Rejected reschedule has no payload ({self.reason.value})")

        return {
            "professionalId": self.professional_id,
            "startDate": instant_at(day, self.slot.start_minutes, timezone).to_iso8601_string(),
            "endDate": instant_at(day, self.slot.end_minutes, timezone).to_iso8601_string(),
        }


@dataclass(frozen=True)
class TimelineCell:
    """One professional's state at one row of the timeline grid."""
    professional_id: EntityId
    state: SlotState
    appointment_ids: Tuple[EntityId, ...] = ()


@dataclass(frozen=True)
class TimelineRow:
    """A row of the timeline grid: one start time, one cell per professional."""
    slot: TimeSlot
    cells: Tuple[TimelineCell, ...]

    def cell_for(self, professional_id: EntityId) -> TimelineCell | None:
        for cell in self.cells:
            if cell.professional_id == professional_id:
                return cell
        return None
