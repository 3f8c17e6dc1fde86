# app/models/__init__.py
from .base import Base
from .availability import DaySchedule, BookingSettings, DateException
from .appointment import Appointment, AppointmentStatus, SlotOccupancy, OCCUPYING_STATUSES

__all__ = [
    "Base",
    "DaySchedule",
    "BookingSettings",
    "DateException",
    "Appointment",
    "AppointmentStatus",
    "SlotOccupancy",
    "OCCUPYING_STATUSES",
]
