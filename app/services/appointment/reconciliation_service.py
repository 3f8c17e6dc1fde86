# ============================================================================
# app/services/appointment/reconciliation_service.py
# Repairs drift between appointments and slot occupancies
# ============================================================================
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.appointment import Appointment, SlotOccupancy, OCCUPYING_STATUSES
from app.utils.time_slots import slot_key

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    orphans_removed: int = 0
    stale_removed: int = 0
    statuses_synced: int = 0
    recreated: int = 0
    conflicts: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.orphans_removed or self.stale_removed or self.statuses_synced or self.recreated)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["changed"] = self.changed
        return data


class LedgerReconciler:
    """
    Sweep that brings slot occupancies back in line with appointments.

    Safe to run repeatedly: a second run over a consistent ledger changes
    nothing. Occupancies are fixed first so that a slot freed by a stale row
    can be claimed again by its rightful appointment in the same run.
    """

    def __init__(self, db: Session):
        self.db = db

    def run(self) -> ReconciliationReport:
        report = ReconciliationReport()
        self._prune_occupancies(report)
        self._restore_occupancies(report)

        if report.changed or report.conflicts:
            logger.warning(f"Ledger reconciliation repaired drift: {report.to_dict()}")
        else:
            logger.info("Ledger reconciliation: no drift found")
        return report

    def _prune_occupancies(self, report: ReconciliationReport) -> None:
        for occupancy in self.db.query(SlotOccupancy).all():
            appointment = occupancy.appointment

            if appointment is None:
                logger.error(f"Orphan occupancy {occupancy.id} for {occupancy.slot_date} {occupancy.time_slot}")
                self.db.delete(occupancy)
                report.orphans_removed += 1
            elif appointment.status not in OCCUPYING_STATUSES:
                logger.warning(f"Booking {appointment.id} is {appointment.status} but still held its slot")
                self.db.delete(occupancy)
                report.stale_removed += 1
            elif (occupancy.slot_date != appointment.appointment_date
                  or occupancy.time_slot != slot_key(appointment.appointment_time)):
                logger.warning(f"Occupancy of booking {appointment.id} points at the wrong slot")
                self.db.delete(occupancy)
                report.stale_removed += 1
            elif occupancy.status != appointment.status:
                occupancy.status = appointment.status
                report.statuses_synced += 1

        self.db.commit()

    def _restore_occupancies(self, report: ReconciliationReport) -> None:
        missing = self.db.query(Appointment).outerjoin(
            SlotOccupancy, SlotOccupancy.appointment_id == Appointment.id
        ).filter(
            Appointment.status.in_(OCCUPYING_STATUSES),
            SlotOccupancy.id.is_(None)
        ).all()

        for appointment in missing:
            holder = self.db.query(SlotOccupancy).filter(
                SlotOccupancy.slot_date == appointment.appointment_date,
                SlotOccupancy.time_slot == slot_key(appointment.appointment_time)
            ).first()
            if holder is not None:
                self._report_conflict(report, appointment, holder.appointment_id)
                continue

            appointment.occupancy = SlotOccupancy(
                slot_date=appointment.appointment_date,
                time_slot=slot_key(appointment.appointment_time),
                status=appointment.status,
            )
            try:
                self.db.commit()
                report.recreated += 1
            except IntegrityError:
                self.db.rollback()
                self._report_conflict(report, appointment, None)

    @staticmethod
    def _report_conflict(report: ReconciliationReport, appointment: Appointment, holder_id) -> None:
        logger.error(
            f"Booking {appointment.id} cannot reclaim {appointment.appointment_date} "
            f"{appointment.appointment_time}: held by {holder_id or 'another booking'}"
        )
        report.conflicts.append(str(appointment.id))
