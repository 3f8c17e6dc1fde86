import logging
import threading
import uuid

import pytest

from app.models.appointment import Appointment, SlotOccupancy
from app.models.availability import DaySchedule
from app.services.appointment.appointment_service import AppointmentService
from app.services.availability.availability_service import AvailabilityService
from app.services.blocked_date.date_exception_service import DateExceptionService
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

from tests.conftest import MONDAY, SUNDAY, FakeNotifier, business_time


@pytest.fixture
def service(db, notifier, clock):
    return AppointmentService(db, notifier=notifier, clock=clock)


class TestCreateBooking:

    def test_creates_confirmed_booking_with_occupancy(self, db, service, monday_schedule, booking_payload, notifier):
        result = service.create_booking(MONDAY, "9:00", "Jane.Doe@Mailbox.org", booking_payload)
        appointment = result.appointment

        assert result.warnings == []
        assert appointment.status == "confirmed"
        assert appointment.email == "jane.doe@mailbox.org"
        assert appointment.appointment_day == "monday"
        assert appointment.country == "BE"
        assert appointment.occupancy.time_slot == "09:00"
        assert appointment.occupancy.status == "confirmed"
        assert notifier.sent == [("confirmation", "jane.doe@mailbox.org"), ("admin", "jane.doe@mailbox.org")]

    def test_stores_schedule_spelling(self, service, monday_schedule, booking_payload):
        appointment = service.create_booking(MONDAY, "09:00", "jane@mailbox.org", booking_payload).appointment
        assert appointment.appointment_time == "9:00"

    def test_second_booking_of_slot_conflicts(self, db, service, monday_schedule, booking_payload):
        service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)

        with pytest.raises(SlotAlreadyBookedError) as exc_info:
            service.create_booking(MONDAY, "09:00", "john@mailbox.org", booking_payload)

        assert exc_info.value.code == "SLOT_ALREADY_BOOKED"
        assert db.query(Appointment).count() == 1

    def test_unique_slot_constraint_catches_missed_precheck(self, db, service, monday_schedule, booking_payload,
                                                            monkeypatch):
        service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)
        # Simulate a competing request that read availability before the first commit
        monkeypatch.setattr(AvailabilityService, "get_booked_slots", staticmethod(lambda db, value: []))

        with pytest.raises(SlotAlreadyBookedError):
            service.create_booking(MONDAY, "9:00", "john@mailbox.org", booking_payload)

        assert db.query(Appointment).count() == 1
        assert db.query(SlotOccupancy).count() == 1

    def test_shorthand_and_24_hour_spelling_share_one_slot(self, db, service, booking_payload):
        ScheduleService.update_day(db, "monday", is_working=True, time_slots=["2:30", "14:30", "9:00"])
        first = service.create_booking(MONDAY, "2:30", "jane@mailbox.org", booking_payload).appointment

        with pytest.raises(SlotAlreadyBookedError):
            service.create_booking(MONDAY, "14:30", "john@mailbox.org", booking_payload)

        assert first.occupancy.time_slot == "14:30"
        assert db.query(Appointment).count() == 1

    def test_unique_slot_constraint_sees_one_key_per_start_time(self, db, service, monday_schedule,
                                                                booking_payload, monkeypatch):
        # A schedule row written before slots were deduplicated by business time
        db.query(DaySchedule).filter(DaySchedule.day_of_week == "monday").update(
            {"time_slots": ["9:00", "2:30", "14:30"]}, synchronize_session=False
        )
        db.commit()
        service.create_booking(MONDAY, "2:30", "jane@mailbox.org", booking_payload)
        monkeypatch.setattr(AvailabilityService, "get_booked_slots", staticmethod(lambda db, value: []))

        with pytest.raises(SlotAlreadyBookedError):
            service.create_booking(MONDAY, "14:30", "john@mailbox.org", booking_payload)

        assert db.query(SlotOccupancy).count() == 1

    def test_concurrent_bookings_for_one_slot(self, session_factory, db, monday_schedule, booking_payload, clock):
        barrier = threading.Barrier(2)
        outcomes = []
        lock = threading.Lock()

        def attempt(email):
            session = session_factory()
            try:
                service = AppointmentService(session, clock=clock)
                barrier.wait(timeout=30)
                service.create_booking(MONDAY, "9:00", email, booking_payload)
                outcome = "booked"
            except SlotAlreadyBookedError:
                outcome = "conflict"
            finally:
                session.close()
            with lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=attempt, args=(email,))
                   for email in ("jane@mailbox.org", "john@mailbox.org")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert sorted(outcomes) == ["booked", "conflict"]
        assert db.query(SlotOccupancy).count() == 1

    def test_email_failure_is_a_warning(self, db, monday_schedule, booking_payload, clock):
        service = AppointmentService(db, notifier=FakeNotifier(fail=True), clock=clock)

        result = service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)

        assert result.warnings == ["email_failed"]
        assert db.query(Appointment).count() == 1

    def test_without_notifier_no_warnings(self, db, monday_schedule, booking_payload, clock):
        result = AppointmentService(db, clock=clock).create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)
        assert result.warnings == []

    @pytest.mark.parametrize("missing", ["first_name", "last_name", "phone_number", "gender", "service_title"])
    def test_required_fields(self, db, service, monday_schedule, booking_payload, missing):
        booking_payload[missing] = "  "

        with pytest.raises(BookingValidationError) as exc_info:
            service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)

        assert exc_info.value.details["field"] == missing
        assert db.query(Appointment).count() == 0

    def test_email_required(self, service, monday_schedule, booking_payload):
        with pytest.raises(BookingValidationError):
            service.create_booking(MONDAY, "9:00", "", booking_payload)

    def test_unknown_gender(self, service, monday_schedule, booking_payload):
        booking_payload["gender"] = "unknown"
        with pytest.raises(BookingValidationError):
            service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)

    def test_booking_disabled(self, db, service, monday_schedule, booking_payload):
        ScheduleService.update_booking_settings(db, is_booking_enabled=False)

        with pytest.raises(BookingDisabledError):
            service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)

    def test_non_working_day(self, service, monday_schedule, booking_payload):
        with pytest.raises(SlotNotOfferedError) as exc_info:
            service.create_booking(SUNDAY, "9:00", "jane@mailbox.org", booking_payload)
        assert exc_info.value.details["reason"] == "not a working day"

    def test_blocked_slot(self, db, service, monday_schedule, booking_payload):
        DateExceptionService.create_block(db, MONDAY, blocked_time_slots=["9:00"])

        with pytest.raises(SlotNotOfferedError) as exc_info:
            service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)
        assert exc_info.value.details["reason"] == "time slot is blocked"

    def test_blocked_day(self, db, service, monday_schedule, booking_payload):
        DateExceptionService.create_block(db, MONDAY)

        with pytest.raises(SlotNotOfferedError) as exc_info:
            service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)
        assert exc_info.value.details["reason"] == "date is blocked"

    def test_time_not_in_schedule(self, service, monday_schedule, booking_payload):
        with pytest.raises(SlotNotOfferedError):
            service.create_booking(MONDAY, "11:00", "jane@mailbox.org", booking_payload)

    def test_too_short_notice(self, db, monday_schedule, booking_payload, notifier):
        service = AppointmentService(db, notifier=notifier, clock=lambda: business_time(2025, 6, 1, 12, 0))

        with pytest.raises(BookingWindowError):
            service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)

    def test_too_far_ahead(self, db, monday_schedule, booking_payload, notifier):
        service = AppointmentService(db, notifier=notifier, clock=lambda: business_time(2025, 4, 1, 9, 0))

        with pytest.raises(BookingWindowError):
            service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)


class TestStatusChanges:

    @pytest.fixture
    def appointment(self, service, monday_schedule, booking_payload):
        return service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload).appointment

    @pytest.mark.parametrize("status", ["cancelled", "completed"])
    def test_freeing_statuses_release_slot(self, db, service, appointment, status):
        updated = service.update_status(appointment.id, status)

        assert updated.status == status
        assert updated.occupancy is None
        assert db.query(SlotOccupancy).count() == 0
        assert "9:00" in AvailabilityService.get_available_slots(db, MONDAY)

    def test_pending_keeps_slot(self, db, service, appointment):
        updated = service.update_status(appointment.id, "pending")

        assert updated.occupancy.status == "pending"
        assert "9:00" not in AvailabilityService.get_available_slots(db, MONDAY)

    def test_reconfirming_reclaims_slot(self, db, service, appointment):
        service.update_status(appointment.id, "cancelled")
        updated = service.update_status(appointment.id, "confirmed")

        assert updated.occupancy is not None
        assert "9:00" not in AvailabilityService.get_available_slots(db, MONDAY)

    def test_reconfirming_taken_slot_conflicts(self, db, service, appointment, booking_payload):
        service.cancel(appointment.id)
        service.create_booking(MONDAY, "9:00", "john@mailbox.org", booking_payload)

        with pytest.raises(SlotAlreadyBookedError):
            service.update_status(appointment.id, "confirmed")

        db.expire_all()
        assert service.get(appointment.id).status == "cancelled"

    def test_status_is_case_insensitive(self, service, appointment):
        assert service.update_status(appointment.id, "Completed").status == "completed"

    def test_invalid_status(self, service, appointment):
        with pytest.raises(InvalidStatusError):
            service.update_status(appointment.id, "no_show")

    def test_unknown_booking(self, service):
        with pytest.raises(AppointmentNotFoundError):
            service.update_status(uuid.uuid4(), "cancelled")


class TestDeleteBooking:

    def test_deletes_exactly_its_occupancy(self, db, service, monday_schedule, booking_payload):
        first = service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload).appointment
        service.create_booking(MONDAY, "10:00", "jane@mailbox.org", booking_payload)

        service.delete_booking(first.id)

        remaining = db.query(SlotOccupancy).all()
        assert [occupancy.time_slot for occupancy in remaining] == ["10:00"]
        assert db.query(Appointment).count() == 1

    def test_missing_occupancy_is_logged(self, db, service, monday_schedule, booking_payload, caplog):
        appointment = service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload).appointment
        db.query(SlotOccupancy).delete()
        db.commit()

        with caplog.at_level(logging.WARNING):
            service.delete_booking(appointment.id)

        assert "Ledger inconsistency" in caplog.text
        assert db.query(Appointment).count() == 0

    def test_unknown_booking(self, service):
        with pytest.raises(AppointmentNotFoundError):
            service.delete_booking(uuid.uuid4())
