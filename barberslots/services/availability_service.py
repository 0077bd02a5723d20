"""
Application services for the booking dashboard.

The service coordinates fetching a day's schedule via a schedule source
adapter and delegates the actual computation to the domain functions. This
keeps the CLI thin and improves testability by allowing the data dependency
to be replaced via a simple protocol.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Protocol, Sequence, Tuple

from pendulum import DateTime

from ..config import AppConfig
from ..domain.clock import TimeOfDay
from ..domain.conflict_detector import bookable_slots
from ..domain.exceptions import ProfessionalNotFound
from ..domain.merge import build_timeline_grid, merge_availability, pick_professional
from ..domain.models import EntityId, RescheduleResult, TimelineRow, TimeSlot, WorkingHours
from ..domain.reschedule import validate_reschedule
from ..domain.schedule import DaySchedule, ProfessionalSchedule
from ..domain.slot_generator import available_dates, drop_past_slots

logger = logging.getLogger(__name__)


class ScheduleSourceProtocol(Protocol):
    """Protocol describing the data-fetch behaviour needed by the service."""

    def get_day_schedule(self, day: date) -> DaySchedule:
        """Return working hours, appointments and blocks of every professional."""


class AvailabilityService:
    """
    Orchestrates schedule retrieval and availability computation.

    Every call re-reads the schedule from the source; nothing is cached
    between calls.
    """

    def __init__(self, schedule_source: ScheduleSourceProtocol, config: AppConfig) -> None:
        self._schedule_source = schedule_source
        self._config = config

    def day_schedule(self, day: date) -> DaySchedule:
        return self._schedule_source.get_day_schedule(day)

    def timeline(self, day: date) -> List[TimelineRow]:
        """Grid rows for the dashboard timeline of ``day``."""
        return self.timeline_view(day)[1]

    def timeline_view(self, day: date) -> Tuple[DaySchedule, List[TimelineRow]]:
        """The schedule together with its grid rows, from a single fetch."""
        schedule = self.day_schedule(day)
        return schedule, build_timeline_grid(schedule.availabilities(), schedule.slot_duration_minutes)

    def merged_slots(self, day: date, now: Optional[DateTime] = None) -> List[TimeSlot]:
        """Start times at which at least one professional is free."""
        schedule = self.day_schedule(day)
        slots = merge_availability(schedule.availabilities(), schedule.slot_duration_minutes)

        if now is not None:
            slots = drop_past_slots(slots, day, now, self._config.timezone)

        return slots

    def professional_slots(
        self,
        day: date,
        professional_id: EntityId,
        service_duration_minutes: Optional[int] = None,
        now: Optional[DateTime] = None,
    ) -> List[TimeSlot]:
        """
        Slots where ``professional_id`` can take a service of the given
        length. Without a duration the slot grid step is used.

        Raises:
            ProfessionalNotFound: If the professional is not on the timeline
        """
        schedule = self.day_schedule(day)
        professional = self._require_professional(schedule, professional_id)
        duration = schedule.slot_duration_minutes if service_duration_minutes is None else service_duration_minutes

        slots = bookable_slots(
            professional.availability(),
            duration,
            schedule.slot_duration_minutes,
        )

        if now is not None:
            slots = drop_past_slots(slots, day, now, self._config.timezone)

        return slots

    def reschedule(
        self,
        day: date,
        appointment_id: EntityId,
        professional_id: EntityId,
        new_start: TimeOfDay,
    ) -> RescheduleResult:
        """
        Validate moving an appointment to ``professional_id`` at ``new_start``.

        Raises:
            AppointmentNotFound: If the appointment is not on the timeline
            ProfessionalNotFound: If the target professional is not on the timeline
        """
        schedule = self.day_schedule(day)
        appointment = schedule.find_appointment(appointment_id)
        target = self._require_professional(schedule, professional_id)

        result = validate_reschedule(target.availability(), appointment, new_start)
        logger.info(
            "Reschedule of appointment %s to professional %s at %s: %s",
            appointment_id,
            professional_id,
            new_start,
            "ok" if result.ok else result.reason.value,
        )
        return result

    def auto_assign(
        self,
        day: date,
        start: TimeOfDay,
        service_duration_minutes: Optional[int] = None,
    ) -> Optional[EntityId]:
        """Pick the free professional with the fewest appointments."""
        schedule = self.day_schedule(day)
        if service_duration_minutes is None:
            service_duration_minutes = self._config.defaults.service_duration_minutes
        return pick_professional(schedule.availabilities(), start, service_duration_minutes)

    def bookable_dates(
        self,
        reference_date: date,
        weekly_hours: Optional[Sequence[WorkingHours]] = None,
    ) -> List[date]:
        """Open dates within the configured booking horizon."""
        hours = weekly_hours if weekly_hours is not None else self._config.weekly_hours()
        return available_dates(hours, reference_date, self._config.defaults.booking_horizon_days)

    @staticmethod
    def _require_professional(schedule: DaySchedule, professional_id: EntityId) -> ProfessionalSchedule:
        professional = schedule.professional(professional_id)
        if professional is None:
            raise ProfessionalNotFound(f"Professional {professional_id} not found on {schedule.day}")
        return professional
