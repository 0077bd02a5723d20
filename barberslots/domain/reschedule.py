"""
Validation of appointment moves, such as a drag and drop on the timeline.

The engine only decides whether the move is legal and what the resulting
interval is. Persisting the move is up to the caller.
"""

import logging

from .clock import TimeOfDay
from .conflict_detector import candidate_window, find_conflict
from .models import Appointment, ProfessionalAvailability, RescheduleResult, TimeSlot

logger = logging.getLogger(__name__)


def validate_reschedule(
    target_professional_availability: ProfessionalAvailability,
    appointment: Appointment,
    new_start: TimeOfDay,
) -> RescheduleResult:
    """
    Validate moving ``appointment`` to ``new_start`` with the target
    professional.

    The new end is derived from the service duration, not from the current
    placement. The appointment is excluded from the overlap check so it
    never conflicts with where it sits now.
    """
    target = target_professional_availability
    duration = appointment.service_duration_minutes
    start, end = candidate_window(new_start, duration)

    reason = find_conflict(
        target.working_hours,
        target.booked_intervals,
        start,
        duration,
        exclude_appointment_id=appointment.id,
    )

    if reason is not None:
        logger.debug(
            "Rejected move of appointment %s to professional %s at %s: %s",
            appointment.id,
            target.professional_id,
            new_start,
            reason.value,
        )
        return RescheduleResult(
            appointment_id=appointment.id,
            professional_id=target.professional_id,
            reason=reason,
        )

    return RescheduleResult(
        appointment_id=appointment.id,
        professional_id=target.professional_id,
        slot=TimeSlot.from_minutes(start, end),
    )
