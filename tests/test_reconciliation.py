import pytest

from app.models.appointment import Appointment, SlotOccupancy
from app.services.appointment.appointment_service import AppointmentService
from app.services.appointment.reconciliation_service import LedgerReconciler

from tests.conftest import MONDAY


@pytest.fixture
def book(db, clock, monday_schedule, booking_payload):
    service = AppointmentService(db, clock=clock)

    def _book(time, email="jane@mailbox.org"):
        return service.create_booking(MONDAY, time, email, booking_payload).appointment

    return _book


def occupancy_of(db, appointment_id):
    return db.query(SlotOccupancy).filter(SlotOccupancy.appointment_id == appointment_id).first()


class TestLedgerReconciler:

    def test_consistent_ledger_is_untouched(self, db, book):
        book("9:00")
        book("10:00", email="john@mailbox.org")

        report = LedgerReconciler(db).run()

        assert report.changed is False
        assert report.conflicts == []
        assert db.query(SlotOccupancy).count() == 2

    def test_removes_occupancy_of_cancelled_booking(self, db, book):
        appointment = book("9:00")
        # Status changed without going through the service
        db.query(Appointment).filter(Appointment.id == appointment.id).update({"status": "cancelled"})
        db.commit()

        report = LedgerReconciler(db).run()

        assert report.stale_removed == 1
        assert occupancy_of(db, appointment.id) is None

    def test_recreates_missing_occupancy(self, db, book):
        appointment = book("9:00")
        db.query(SlotOccupancy).delete()
        db.commit()

        report = LedgerReconciler(db).run()

        assert report.recreated == 1
        occupancy = occupancy_of(db, appointment.id)
        assert (occupancy.slot_date.isoformat(), occupancy.time_slot) == (MONDAY, "09:00")

    def test_second_run_changes_nothing(self, db, book):
        book("9:00")
        db.query(SlotOccupancy).delete()
        db.commit()

        LedgerReconciler(db).run()
        report = LedgerReconciler(db).run()

        assert report.to_dict() == {
            "orphans_removed": 0,
            "stale_removed": 0,
            "statuses_synced": 0,
            "recreated": 0,
            "conflicts": [],
            "changed": False,
        }

    def test_syncs_status(self, db, book):
        appointment = book("9:00")
        db.query(Appointment).filter(Appointment.id == appointment.id).update({"status": "pending"})
        db.commit()

        report = LedgerReconciler(db).run()

        assert report.statuses_synced == 1
        assert occupancy_of(db, appointment.id).status == "pending"

    def test_moves_occupancy_pointing_at_wrong_slot(self, db, book):
        appointment = book("9:00")
        db.query(SlotOccupancy).update({"time_slot": "14:00"})
        db.commit()

        report = LedgerReconciler(db).run()

        assert report.stale_removed == 1
        assert report.recreated == 1
        assert occupancy_of(db, appointment.id).time_slot == "09:00"

    def test_slot_held_by_another_booking_is_a_conflict(self, db, book):
        holder = book("9:00")
        other = book("10:00", email="john@mailbox.org")
        # other's record now claims 9:00 but has lost its occupancy
        db.query(SlotOccupancy).filter(SlotOccupancy.appointment_id == other.id).delete()
        db.query(Appointment).filter(Appointment.id == other.id).update({"appointment_time": "9:00"})
        db.commit()

        report = LedgerReconciler(db).run()

        assert report.conflicts == [str(other.id)]
        assert occupancy_of(db, holder.id).time_slot == "09:00"
        assert occupancy_of(db, other.id) is None
