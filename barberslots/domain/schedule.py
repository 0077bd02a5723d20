"""
A day's schedule as handed over by the data-fetch layer.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

from .exceptions import AppointmentNotFound
from .models import (
    Appointment,
    BookedInterval,
    EntityId,
    ProfessionalAvailability,
    WorkingHours,
)


@dataclass(frozen=True)
class ProfessionalSchedule:
    """One professional's hours, appointments and blocking periods on a day."""
    professional_id: EntityId
    name: str
    working_hours: WorkingHours
    appointments: Tuple[Appointment, ...] = field(default_factory=tuple)
    blocks: Tuple[BookedInterval, ...] = field(default_factory=tuple)

    def booked_intervals(self) -> List[BookedInterval]:
        """Intervals that occupy time; cancelled appointments are left out."""
        intervals = [
            appointment.as_booked_interval()
            for appointment in self.appointments
            if appointment.blocks_time()
        ]
        intervals.extend(self.blocks)
        return intervals

    def availability(self) -> ProfessionalAvailability:
        return ProfessionalAvailability(
            professional_id=self.professional_id,
            working_hours=self.working_hours,
            booked_intervals=tuple(self.booked_intervals()),
        )


@dataclass(frozen=True)
class DaySchedule:
    """All professionals of a business on one calendar day."""
    day: date
    slot_duration_minutes: int
    professionals: Tuple[ProfessionalSchedule, ...] = field(default_factory=tuple)

    def availabilities(self) -> List[ProfessionalAvailability]:
        return [professional.availability() for professional in self.professionals]

    def professional(self, professional_id: EntityId) -> Optional[ProfessionalSchedule]:
        """Look a professional up; ids compare by their string form, as payloads send either."""
        for professional in self.professionals:
            if str(professional.professional_id) == str(professional_id):
                return professional
        return None

    def find_appointment(self, appointment_id: EntityId) -> Appointment:
        """
        Look an appointment up across all professionals.

        Raises:
            AppointmentNotFound: If no professional has the appointment
        """
        for professional in self.professionals:
            for appointment in professional.appointments:
                if str(appointment.id) == str(appointment_id):
                    return appointment

        raise AppointmentNotFound(f"Appointment {appointment_id} not found on {self.day}")
