"""
barberslots - Appointment slot computation and conflict resolution for
barbershop booking.
"""

__version__ = "0.1.0"
