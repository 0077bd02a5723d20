"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .conflict_detector import bookable_slots, find_conflict, intervals_overlap, is_slot_available
from .merge import build_timeline_grid, merge_availability, pick_professional, timeline_slots
from .models import (
    Appointment,
    AppointmentStatus,
    BookedInterval,
    ConflictReason,
    ProfessionalAvailability,
    RescheduleResult,
    SlotState,
    TimelineCell,
    TimelineRow,
    TimeSlot,
    WorkingHours,
)
from .reschedule import validate_reschedule
from .schedule import DaySchedule, ProfessionalSchedule
from .slot_generator import available_dates, drop_past_slots, generate_slots

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "BookedInterval",
    "ConflictReason",
    "DaySchedule",
    "ProfessionalAvailability",
    "ProfessionalSchedule",
    "RescheduleResult",
    "SlotState",
    "TimelineCell",
    "TimelineRow",
    "TimeSlot",
    "WorkingHours",
    "available_dates",
    "bookable_slots",
    "build_timeline_grid",
    "drop_past_slots",
    "find_conflict",
    "generate_slots",
    "intervals_overlap",
    "is_slot_available",
    "merge_availability",
    "pick_professional",
    "timeline_slots",
    "validate_reschedule",
]
