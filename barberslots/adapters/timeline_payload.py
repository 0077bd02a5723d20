"""
Boundary validation of the appointment timeline payload.

The backend answers ``GET /appointments/{businessId}/timeline?date=...``
with the day's professionals, their working hours and appointments. Loose
JSON is validated here once; everything past this module works on the
immutable domain models.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..domain.clock import parse_hhmm, project_interval, weekday_index
from ..domain.exceptions import ContractViolation, PayloadError
from ..domain.models import Appointment, AppointmentStatus, BookedInterval, WorkingHours
from ..domain.schedule import DaySchedule, ProfessionalSchedule

logger = logging.getLogger(__name__)

DEFAULT_SLOT_DURATION_MINUTES = 30


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WorkingHoursPayload(_Payload):
    day_of_week: int = Field(alias="dayOfWeek", ge=0, le=6)
    open_time: Optional[str] = Field(default=None, alias="openTime")
    close_time: Optional[str] = Field(default=None, alias="closeTime")
    break_start: Optional[str] = Field(default=None, alias="breakStart")
    break_end: Optional[str] = Field(default=None, alias="breakEnd")
    closed: bool = False

    @field_validator("open_time", "close_time", "break_start", "break_end")
    @classmethod
    def validate_time_of_day(cls, value: Optional[str]) -> Optional[str]:
        """Empty strings mean "not set"; anything else must be HH:MM."""
        if value is None or not value.strip():
            return None
        parse_hhmm(value)
        return value.strip()

    def to_domain(self) -> WorkingHours:
        return WorkingHours(
            day_of_week=self.day_of_week,
            open_time=self.open_time,
            close_time=self.close_time,
            break_start=self.break_start,
            break_end=self.break_end,
            closed=self.closed,
        )


class ServicePayload(_Payload):
    name: Optional[str] = None
    duration: int = Field(gt=0)
    price: Optional[float] = None


class AppointmentPayload(_Payload):
    id: Union[int, str]
    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    status: AppointmentStatus = AppointmentStatus.CONFIRMED
    service: Optional[ServicePayload] = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, value: Any) -> AppointmentStatus:
        if value is None:
            return AppointmentStatus.CONFIRMED
        if isinstance(value, AppointmentStatus):
            return value
        return AppointmentStatus.parse(str(value))


class BlockPayload(_Payload):
    id: Optional[Union[int, str]] = None
    start_date: str = Field(validation_alias=AliasChoices("startDate", "data_inicio", "start_date"))
    end_date: str = Field(validation_alias=AliasChoices("endDate", "data_fim", "end_date"))
    reason: Optional[str] = Field(default=None, validation_alias=AliasChoices("reason", "motivo"))


class ProfessionalPayload(_Payload):
    id: Union[int, str]
    name: str = ""
    working_hours: Optional[WorkingHoursPayload] = Field(default=None, alias="workingHours")
    appointments: List[AppointmentPayload] = Field(default_factory=list)
    blocks: List[BlockPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("blocks", "bloqueios", "unavailability"),
    )


class TimelinePayload(_Payload):
    day: date = Field(alias="date")
    slot_duration_minutes: int = Field(default=DEFAULT_SLOT_DURATION_MINUTES, alias="slotDurationMinutes", gt=0)
    professionals: List[ProfessionalPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("professionals", "barbers"),
    )


def parse_timeline(data: Dict[str, Any]) -> TimelinePayload:
    """
    Validate a decoded timeline response.

    Raises:
        PayloadError: If the payload does not match the timeline shape
    """
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        # Responses wrapped by the API's response interceptor
        data = data["data"]

    if not isinstance(data, dict):
        raise PayloadError("Timeline payload must be a JSON object")

    try:
        return TimelinePayload.model_validate(data)
    except ValidationError as exc:
        raise PayloadError(f"Invalid timeline payload: {exc}") from exc


def _project_appointment(
    item: AppointmentPayload,
    professional_id: Union[int, str],
    day: date,
    timezone: str,
) -> Appointment | None:
    projection = project_interval(item.start_date, item.end_date, day, timezone)

    if projection is None:
        logger.warning("Skipping appointment %s: not on %s", item.id, day)
        return None

    if projection.clipped:
        logger.warning("Appointment %s crosses midnight, clipped to %s", item.id, day)

    if item.service is not None:
        duration = item.service.duration
    else:
        duration = projection.end - projection.start

    return Appointment(
        id=item.id,
        professional_id=professional_id,
        start_minutes=projection.start,
        end_minutes=projection.end,
        service_duration_minutes=duration,
        status=item.status,
    )


def _project_block(
    item: BlockPayload,
    professional_id: Union[int, str],
    day: date,
    timezone: str,
) -> BookedInterval | None:
    projection = project_interval(item.start_date, item.end_date, day, timezone)

    if projection is None:
        logger.debug("Blocking period %s not on %s", item.id, day)
        return None

    return BookedInterval.block(projection.start, projection.end, professional_id=professional_id)


def to_day_schedule(payload: TimelinePayload, timezone: str) -> DaySchedule:
    """
    Project a validated payload onto the engine's minutes-of-day axis.

    Raises:
        PayloadError: If an instant cannot be parsed
    """
    day = payload.day
    professionals: List[ProfessionalSchedule] = []

    try:
        for professional in payload.professionals:
            if professional.working_hours is None:
                working_hours = WorkingHours.closed_on(weekday_index(day))
            else:
                working_hours = professional.working_hours.to_domain()

            appointments = [
                appointment
                for appointment in (
                    _project_appointment(item, professional.id, day, timezone)
                    for item in professional.appointments
                )
                if appointment is not None
            ]
            blocks = [
                block
                for block in (
                    _project_block(item, professional.id, day, timezone)
                    for item in professional.blocks
                )
                if block is not None
            ]

            professionals.append(ProfessionalSchedule(
                professional_id=professional.id,
                name=professional.name,
                working_hours=working_hours,
                appointments=tuple(appointments),
                blocks=tuple(blocks),
            ))
    except ContractViolation as exc:
        raise PayloadError(f"Invalid timeline payload: {exc}") from exc

    return DaySchedule(
        day=day,
        slot_duration_minutes=payload.slot_duration_minutes,
        professionals=tuple(professionals),
    )
