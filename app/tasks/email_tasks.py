# ===== app/tasks/email_tasks.py =====
from uuid import UUID
import logging

from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.models.appointment import Appointment
from app.services.email.booking_notifier import BookingNotifier

logger = logging.getLogger(__name__)


def _deliver(task, kind: str, appointment_id: str):
    db = SessionLocal()
    try:
        appointment = db.query(Appointment).filter(Appointment.id == UUID(appointment_id)).first()
        if appointment is None:
            logger.warning(f"Booking {appointment_id} no longer exists, {kind} email dropped")
            return {"status": "skipped", "appointment_id": appointment_id}

        notifier = BookingNotifier()
        send = {
            "confirmation": notifier.send_booking_confirmation,
            "admin": notifier.send_admin_notification,
        }[kind]
        sent = send(appointment)

        logger.info(f"Booking {appointment_id} {kind} email {'sent' if sent else 'skipped'}")
        return {"status": "success" if sent else "skipped", "appointment_id": appointment_id}

    except Exception as exc:
        logger.error(f"Failed to send {kind} email for booking {appointment_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise task.retry(exc=exc, countdown=60 * (2 ** task.request.retries))

    finally:
        db.close()


@celery_app.task(bind=True, max_retries=3)
def send_booking_confirmation_email(self, appointment_id: str):
    """Confirmation email to the customer of a new booking"""
    return _deliver(self, "confirmation", appointment_id)


@celery_app.task(bind=True, max_retries=3)
def send_booking_admin_email(self, appointment_id: str):
    """New-booking notice to the business admin"""
    return _deliver(self, "admin", appointment_id)


class QueuedBookingNotifier:
    """
    Notifier used on the request path.

    Emails go out from the worker; a booking request only publishes the
    task, so an SMTP outage never holds up the API. Errors from the broker
    propagate, which the booking service reports as email_failed.
    """

    def send_booking_confirmation(self, appointment: Appointment) -> bool:
        send_booking_confirmation_email.delay(str(appointment.id))
        return True

    def send_admin_notification(self, appointment: Appointment) -> bool:
        send_booking_admin_email.delay(str(appointment.id))
        return True
