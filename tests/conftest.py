"""Shared fixtures: per-test SQLite database, fake notifier, fixed clock, API client."""
import os

# Must be set before anything imports app.config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BUSINESS_TIMEZONE"] = "Europe/Brussels"
os.environ["EMAIL_ENABLED"] = "false"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.config.database import build_engine, create_tables
from app.services.schedule.schedule_service import ScheduleService
from app.utils.timezone import business_tz

# 2025-06-01 is a Sunday, 2025-06-02 a Monday
MONDAY = "2025-06-02"
SUNDAY = "2025-06-01"
MONDAY_SLOTS = ["9:00", "10:00", "14:00"]


class FakeNotifier:
    """Records deliveries; raises on every send when fail is set."""

    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    def _record(self, kind, appointment):
        if self.fail:
            raise ConnectionRefusedError("SMTP server unavailable")
        self.sent.append((kind, appointment.email))
        return True

    def send_booking_confirmation(self, appointment):
        return self._record("confirmation", appointment)

    def send_admin_notification(self, appointment):
        return self._record("admin", appointment)

    def send_reminder(self, appointment):
        return self._record("reminder", appointment)


def business_time(*args):
    return business_tz().localize(datetime(*args))


@pytest.fixture
def engine(tmp_path):
    """File-backed so that several sessions and threads share one database."""
    engine = build_engine(f"sqlite:///{tmp_path / 'bookings.db'}")
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def clock():
    """Wednesday before MONDAY, 09:00 business time."""
    return lambda: business_time(2025, 5, 28, 9, 0)


@pytest.fixture
def monday_schedule(db):
    ScheduleService.update_day(db, "monday", is_working=True, time_slots=MONDAY_SLOTS)
    return MONDAY_SLOTS


@pytest.fixture
def booking_payload():
    return {
        "first_name": "Jane",
        "last_name": "Doe",
        "phone_number": "+32470123456",
        "gender": "female",
        "service_title": "Deep tissue massage",
    }


@pytest.fixture
def client(session_factory, notifier, clock):
    from app.api.dependencies import get_clock, get_notifier
    from app.config.database import get_db
    from app.main import create_app

    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_clock] = lambda: clock

    yield TestClient(app)
    app.dependency_overrides.clear()
