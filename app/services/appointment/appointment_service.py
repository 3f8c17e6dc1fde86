# ============================================================================
# app/services/appointment/appointment_service.py
# Booking ledger: appointments and the slot occupancy they hold
# ============================================================================
"""Service for creating and changing bookings"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.models.appointment import (
    Appointment, AppointmentStatus, SlotOccupancy, OCCUPYING_STATUSES,
)
from app.services.availability.availability_service import AvailabilityService
from app.services.exceptions import (
    AppointmentNotFoundError,
    BookingDisabledError,
    BookingValidationError,
    BookingWindowError,
    InvalidStatusError,
    SlotAlreadyBookedError,
    SlotNotOfferedError,
)
from app.services.schedule.schedule_service import ScheduleService
from app.utils.time_slots import find_slot, parse_time_slot, slot_key
from app.utils.timezone import DateInput, anchor, business_now, day_of_week, slot_start

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name", "phone_number", "gender", "service_title")
VALID_GENDERS = ("male", "female", "other")
VALID_STATUSES = tuple(status.value for status in AppointmentStatus)

EMAIL_FAILED = "email_failed"


@dataclass
class BookingResult:
    """A created booking plus any non-fatal problems met after commit"""
    appointment: Appointment
    warnings: List[str] = field(default_factory=list)


class AppointmentService:
    """
    Writes the booking ledger.

    Every appointment that holds its slot (pending or confirmed) owns exactly
    one SlotOccupancy row; the pair is written and removed in one transaction.
    The UNIQUE(slot_date, time_slot) constraint on occupancies is what rejects
    a second booking of the same slot. Occupancies store the canonical
    slot key, so "2:30" and "14:30" collide there.
    """

    def __init__(
            self,
            db: Session,
            notifier: Optional[Any] = None,
            clock: Optional[Callable[[], datetime]] = None
    ):
        self.db = db
        self.notifier = notifier
        self.clock = clock or business_now

    def get(self, appointment_id: UUID) -> Appointment:
        appointment = self.db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise AppointmentNotFoundError(appointment_id)
        return appointment

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_payload(email: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not email or not str(email).strip():
            raise BookingValidationError("email is required", field="email")

        for name in REQUIRED_FIELDS:
            value = payload.get(name)
            if value is None or not str(value).strip():
                raise BookingValidationError(f"{name} is required", field=name)

        gender = str(payload["gender"]).strip().lower()
        if gender not in VALID_GENDERS:
            raise BookingValidationError(
                f"gender must be one of {', '.join(VALID_GENDERS)}",
                field="gender",
                details={"valid_values": list(VALID_GENDERS)},
            )

        return {
            "service_id": payload.get("service_id"),
            "service_title": str(payload["service_title"]).strip(),
            "first_name": str(payload["first_name"]).strip(),
            "last_name": str(payload["last_name"]).strip(),
            "email": str(email).strip().lower(),
            "phone_number": str(payload["phone_number"]).strip(),
            "country": (payload.get("country") or get_settings().DEFAULT_COUNTRY).upper(),
            "gender": gender,
            "special_requests": payload.get("special_requests") or "",
            "message": payload.get("message") or "",
        }

    def _resolve_offered_slot(self, day, time: str) -> str:
        """The schedule's spelling of the requested time, if it is offered."""
        offered = AvailabilityService.offered_slots(self.db, day)
        slot = find_slot(offered.available_slots, time)
        if slot is not None:
            return slot

        if not offered.is_working_day:
            reason = "not a working day"
        elif offered.is_full_day_blocked:
            reason = "date is blocked"
        elif find_slot(offered.blocked_slots, time) is not None:
            reason = "time slot is blocked"
        else:
            reason = "time slot is not in the schedule"
        raise SlotNotOfferedError(day.isoformat(), time, reason)

    def _check_booking_window(self, day, slot: str, booking_settings) -> None:
        now = self.clock()
        starts_at = slot_start(day, slot)
        earliest = now + timedelta(hours=booking_settings.min_advance_booking_hours)
        latest = now + timedelta(days=booking_settings.max_advance_booking_days)

        details = {
            "date": day.isoformat(),
            "time": slot,
            "earliest": earliest.isoformat(),
            "latest": latest.isoformat(),
        }
        if starts_at < earliest:
            raise BookingWindowError(
                f"Bookings must be made at least "
                f"{booking_settings.min_advance_booking_hours} hours in advance",
                details=details,
            )
        if starts_at > latest:
            raise BookingWindowError(
                f"Bookings can be made at most "
                f"{booking_settings.max_advance_booking_days} days in advance",
                details=details,
            )

    def create_booking(
            self,
            date: DateInput,
            time: str,
            email: str,
            payload: Dict[str, Any]
    ) -> BookingResult:
        """
        Book one slot for a customer.

        Checks run in order: required fields, booking switch, the slot being
        offered on that date, the booking window, then a quick occupancy
        check. The appointment and its occupancy are committed together; if
        another booking claimed the slot in the meantime the commit fails on
        the unique slot constraint and nothing is written.

        Notifications are sent after commit. A failed notification leaves the
        booking in place and adds "email_failed" to the result warnings.
        """
        fields = self._validate_payload(email, payload or {})
        parse_time_slot(time, field="time")

        anchored = anchor(date)
        day = anchored.date()

        booking_settings = ScheduleService.get_booking_settings(self.db)
        if not booking_settings.is_booking_enabled:
            raise BookingDisabledError()

        slot = self._resolve_offered_slot(day, time)
        self._check_booking_window(day, slot, booking_settings)

        if find_slot(AvailabilityService.get_booked_slots(self.db, day), slot) is not None:
            raise SlotAlreadyBookedError(day.isoformat(), slot)

        status = AppointmentStatus.CONFIRMED.value
        appointment = Appointment(
            appointment_date=day,
            appointment_day=day_of_week(anchored),
            appointment_time=slot,
            status=status,
            **fields,
        )
        appointment.occupancy = SlotOccupancy(slot_date=day, time_slot=slot_key(slot), status=status)

        self.db.add(appointment)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Slot {slot} on {day} taken concurrently, booking for {fields['email']} rejected")
            raise SlotAlreadyBookedError(day.isoformat(), slot)

        self.db.refresh(appointment)
        logger.info(f"✅ Booking created: {appointment.id} ({day} {slot}, {appointment.email})")

        return BookingResult(appointment=appointment, warnings=self._notify_created(appointment))

    def _notify_created(self, appointment: Appointment) -> List[str]:
        if self.notifier is None:
            return []

        warnings = []
        for send in (self.notifier.send_booking_confirmation, self.notifier.send_admin_notification):
            try:
                send(appointment)
            except Exception as e:
                logger.error(f"Booking {appointment.id} notification failed: {e}")
                if EMAIL_FAILED not in warnings:
                    warnings.append(EMAIL_FAILED)
        return warnings

    # ------------------------------------------------------------------
    # Status changes and deletion
    # ------------------------------------------------------------------

    def update_status(self, appointment_id: UUID, status: str) -> Appointment:
        """
        Move a booking to a new status and mirror it onto its occupancy.

        Cancelled and completed bookings release their slot. Moving a booking
        back to pending or confirmed claims the slot again, which fails with
        SlotAlreadyBookedError if another booking holds it by then.
        """
        new_status = str(status or "").strip().lower()
        if new_status not in VALID_STATUSES:
            raise InvalidStatusError(status, VALID_STATUSES)

        appointment = self.get(appointment_id)
        previous = appointment.status

        if new_status in OCCUPYING_STATUSES:
            if appointment.occupancy is None:
                appointment.occupancy = SlotOccupancy(
                    slot_date=appointment.appointment_date,
                    time_slot=slot_key(appointment.appointment_time),
                    status=new_status,
                )
            else:
                appointment.occupancy.status = new_status
        elif appointment.occupancy is not None:
            appointment.occupancy = None

        appointment.status = new_status
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise SlotAlreadyBookedError(
                appointment.appointment_date.isoformat(), appointment.appointment_time
            )

        self.db.refresh(appointment)
        logger.info(f"✅ Booking {appointment.id} status: {previous} -> {new_status}")
        return appointment

    def cancel(self, appointment_id: UUID) -> Appointment:
        """Customer-initiated cancellation."""
        return self.update_status(appointment_id, AppointmentStatus.CANCELLED.value)

    def delete_booking(self, appointment_id: UUID) -> None:
        """Delete an appointment together with the occupancy it owns."""
        appointment = self.get(appointment_id)

        if appointment.occupies_slot and appointment.occupancy is None:
            logger.warning(
                f"Ledger inconsistency: booking {appointment.id} is {appointment.status} "
                f"but holds no occupancy for {appointment.appointment_date} {appointment.appointment_time}"
            )

        self.db.delete(appointment)
        self.db.commit()
        logger.info(f"✅ Booking deleted: {appointment_id}")
