"""
Domain-specific exception hierarchy for the barberslots availability engine.

Scheduling outcomes (a taken slot, a closed day) are never raised: they are
returned as booleans or ``ConflictReason`` tags. Exceptions are reserved for
caller bugs and for failures at the data boundary.
"""


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class ContractViolation(SchedulingError, ValueError):
    """Raised when a caller passes input the engine does not support."""


class PayloadError(SchedulingError):
    """Raised when a timeline payload cannot be validated at the boundary."""


class ScheduleSourceError(SchedulingError):
    """Raised when schedule data cannot be fetched from a file or the API."""


class AppointmentNotFound(SchedulingError, LookupError):
    """Raised when an appointment id is not part of the day's schedule."""


class ProfessionalNotFound(SchedulingError, LookupError):
    """Raised when a professional id is not part of the day's schedule."""
