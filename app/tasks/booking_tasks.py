# ===== app/tasks/booking_tasks.py =====
from datetime import datetime, timedelta, timezone
from typing import Dict
import logging

from sqlalchemy.orm import Session

from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.models.appointment import Appointment, AppointmentStatus
from app.services.appointment.reconciliation_service import LedgerReconciler
from app.services.email.booking_notifier import BookingNotifier
from app.utils.timezone import business_today

logger = logging.getLogger(__name__)


def send_due_reminders(db: Session, notifier, today=None) -> Dict[str, int]:
    """
    Email customers whose confirmed appointment is tomorrow (business date).

    Each appointment is stamped with reminder_sent_at once delivered, so a
    re-run only picks up the ones that failed.
    """
    tomorrow = (today or business_today()) + timedelta(days=1)

    appointments = db.query(Appointment).filter(
        Appointment.appointment_date == tomorrow,
        Appointment.status == AppointmentStatus.CONFIRMED.value,
        Appointment.reminder_sent_at.is_(None)
    ).all()

    results = {"due": len(appointments), "sent": 0, "failed": 0}
    for appointment in appointments:
        try:
            if not notifier.send_reminder(appointment):
                continue
        except Exception as e:
            logger.error(f"Reminder for booking {appointment.id} failed: {e}")
            results["failed"] += 1
            continue

        appointment.reminder_sent_at = datetime.now(timezone.utc)
        db.commit()
        results["sent"] += 1

    logger.info(f"Reminders for {tomorrow}: {results}")
    return results


@celery_app.task(bind=True, max_retries=3)
def reconcile_booking_ledger(self):
    """Periodic sweep repairing appointment/occupancy drift"""
    db = SessionLocal()
    try:
        report = LedgerReconciler(db).run()
        return {"status": "success", **report.to_dict()}

    except Exception as exc:
        db.rollback()
        logger.error(f"Ledger reconciliation failed: {exc}")

        # The sweep is idempotent, so a retry just starts over
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))

    finally:
        db.close()


@celery_app.task(bind=True, max_retries=3)
def send_booking_reminders(self):
    """Daily job: remind customers of tomorrow's appointments"""
    db = SessionLocal()
    try:
        results = send_due_reminders(db, BookingNotifier())
        return {"status": "success", **results}

    except Exception as exc:
        db.rollback()
        logger.error(f"Sending booking reminders failed: {exc}")
        raise self.retry(exc=exc, countdown=60 * (2 ** self.request.retries))

    finally:
        db.close()
