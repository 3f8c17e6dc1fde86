# ===== app/services/availability/availability_service.py =====
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import List, Dict, Any
from sqlalchemy.orm import Session
from app.models.appointment import Appointment, SlotOccupancy, OCCUPYING_STATUSES
from app.services.blocked_date.date_exception_service import DateExceptionService
from app.services.schedule.schedule_service import ScheduleService
from app.utils.time_slots import subtract_slots
from app.utils.timezone import DateInput, anchor, day_of_week
import logging

logger = logging.getLogger(__name__)


@dataclass
class DayAvailability:
    """Resolved availability of one business date"""
    date: date
    day_of_week: str
    is_working_day: bool
    is_full_day_blocked: bool = False
    all_day_slots: List[str] = field(default_factory=list)
    blocked_slots: List[str] = field(default_factory=list)
    booked_slots: List[str] = field(default_factory=list)
    available_slots: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data


class AvailabilityService:
    """
    Answers "which slots can be booked on date D".

    available = weekly schedule for the day
                - slots blocked by an active date exception
                - slots held by an occupancy record
    Read-only; used by the booking calendar and as the booking pre-check.
    """

    @staticmethod
    def _offered(db: Session, value: DateInput) -> DayAvailability:
        """Schedule minus exceptions, without looking at bookings."""
        anchored = anchor(value)
        day = anchored.date()
        day_name = day_of_week(anchored)

        day_schedule = ScheduleService.get_day(db, day_name)
        if not day_schedule.is_working:
            return DayAvailability(date=day, day_of_week=day_name, is_working_day=False)

        all_day_slots = list(day_schedule.time_slots or [])
        result = DayAvailability(
            date=day,
            day_of_week=day_name,
            is_working_day=True,
            all_day_slots=all_day_slots,
            available_slots=list(all_day_slots),
        )

        exception = DateExceptionService.find_for_date(db, day, active_only=True)
        if exception is None:
            return result

        blocked = exception.effective_blocked_slots
        if blocked is None:
            result.is_full_day_blocked = True
            result.blocked_slots = list(all_day_slots)
            result.available_slots = []
            return result

        result.blocked_slots = blocked
        result.available_slots = subtract_slots(all_day_slots, result.blocked_slots)
        return result

    @staticmethod
    def get_booked_slots(db: Session, value: DateInput) -> List[str]:
        """Slots held by occupancy records on the date, spelled as booked."""
        day = anchor(value).date()
        rows = db.query(Appointment.appointment_time).join(
            SlotOccupancy, SlotOccupancy.appointment_id == Appointment.id
        ).filter(
            SlotOccupancy.slot_date == day,
            SlotOccupancy.status.in_(OCCUPYING_STATUSES)
        ).all()
        return [row.appointment_time for row in rows]

    @staticmethod
    def resolve_day(db: Session, value: DateInput) -> DayAvailability:
        """Full breakdown of a date's availability."""
        result = AvailabilityService._offered(db, value)
        if not result.available_slots:
            return result

        result.booked_slots = AvailabilityService.get_booked_slots(db, result.date)
        result.available_slots = subtract_slots(result.available_slots, result.booked_slots)
        return result

    @staticmethod
    def get_available_slots(db: Session, value: DateInput) -> List[str]:
        """Bookable slots on a date, in schedule order."""
        return AvailabilityService.resolve_day(db, value).available_slots

    @staticmethod
    def offered_slots(db: Session, value: DateInput) -> DayAvailability:
        """Slots the business offers on a date, ignoring existing bookings."""
        return AvailabilityService._offered(db, value)
