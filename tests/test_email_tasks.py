import uuid

import pytest
from kombu.exceptions import OperationalError

from app.models.appointment import Appointment
from app.services.appointment.appointment_service import AppointmentService
from app.tasks import email_tasks
from app.tasks.email_tasks import QueuedBookingNotifier

from tests.conftest import MONDAY, FakeNotifier


@pytest.fixture
def published(monkeypatch):
    """Captures task publications instead of sending them to the broker."""
    calls = []
    for task in (email_tasks.send_booking_confirmation_email, email_tasks.send_booking_admin_email):
        monkeypatch.setattr(task, "delay", lambda appointment_id, name=task.name: calls.append((name, appointment_id)))
    return calls


@pytest.fixture
def worker_session(monkeypatch, session_factory):
    monkeypatch.setattr(email_tasks, "SessionLocal", session_factory)


class TestQueuedBookingNotifier:

    def test_booking_only_publishes_email_tasks(self, db, clock, monday_schedule, booking_payload, published):
        service = AppointmentService(db, notifier=QueuedBookingNotifier(), clock=clock)

        result = service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)

        appointment_id = str(result.appointment.id)
        assert result.warnings == []
        assert published == [
            ("app.tasks.email_tasks.send_booking_confirmation_email", appointment_id),
            ("app.tasks.email_tasks.send_booking_admin_email", appointment_id),
        ]

    def test_broker_outage_is_a_warning(self, db, clock, monday_schedule, booking_payload, monkeypatch):
        def broker_down(appointment_id):
            raise OperationalError("broker unreachable")

        monkeypatch.setattr(email_tasks.send_booking_confirmation_email, "delay", broker_down)
        monkeypatch.setattr(email_tasks.send_booking_admin_email, "delay", broker_down)
        service = AppointmentService(db, notifier=QueuedBookingNotifier(), clock=clock)

        result = service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload)

        assert result.warnings == ["email_failed"]
        assert db.query(Appointment).count() == 1


class TestEmailTasks:

    @pytest.fixture
    def appointment(self, db, clock, monday_schedule, booking_payload):
        service = AppointmentService(db, clock=clock)
        return service.create_booking(MONDAY, "9:00", "jane@mailbox.org", booking_payload).appointment

    def test_worker_sends_confirmation_and_admin_email(self, appointment, worker_session, monkeypatch):
        notifier = FakeNotifier()
        monkeypatch.setattr(email_tasks, "BookingNotifier", lambda: notifier)

        confirmation = email_tasks.send_booking_confirmation_email(str(appointment.id))
        admin = email_tasks.send_booking_admin_email(str(appointment.id))

        assert confirmation["status"] == admin["status"] == "success"
        assert notifier.sent == [("confirmation", "jane@mailbox.org"), ("admin", "jane@mailbox.org")]

    def test_deleted_booking_is_skipped(self, worker_session, monkeypatch):
        notifier = FakeNotifier()
        monkeypatch.setattr(email_tasks, "BookingNotifier", lambda: notifier)

        result = email_tasks.send_booking_confirmation_email(str(uuid.uuid4()))

        assert result["status"] == "skipped"
        assert notifier.sent == []

    def test_smtp_failure_is_retried(self, appointment, worker_session, monkeypatch):
        monkeypatch.setattr(email_tasks, "BookingNotifier", lambda: FakeNotifier(fail=True))
        retried = []

        def fake_retry(exc=None, countdown=None, **kwargs):
            retried.append(countdown)
            return RuntimeError("retry scheduled")

        monkeypatch.setattr(email_tasks.send_booking_confirmation_email, "retry", fake_retry)

        with pytest.raises(RuntimeError):
            email_tasks.send_booking_confirmation_email(str(appointment.id))

        assert retried == [60]
