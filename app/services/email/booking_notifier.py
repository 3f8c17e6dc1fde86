# ===== app/services/email/booking_notifier.py =====
import logging
from typing import Optional

from app.config.settings import settings
from app.models.appointment import Appointment
from app.services.email.email_service import EmailService

logger = logging.getLogger(__name__)


def _when(appointment: Appointment) -> str:
    return f"{appointment.appointment_date.strftime('%A %d %B %Y')} at {appointment.appointment_time}"


class BookingNotifier:
    """
    Booking emails to customers and the business admin.

    Runs on the worker: the email tasks and the reminder job call it
    directly. Delivery errors propagate to the caller.
    """

    def __init__(self, email_service=EmailService, admin_email: Optional[str] = None):
        self.email_service = email_service
        self.admin_email = admin_email or settings.ADMIN_EMAIL

    def _send(self, to_email: str, subject: str, html: str, text: str) -> bool:
        if not settings.EMAIL_ENABLED:
            logger.info(f"Email disabled, skipping '{subject}' to {to_email}")
            return False
        return self.email_service.send_email(to_email, subject, html, plain_text=text)

    def send_booking_confirmation(self, appointment: Appointment) -> bool:
        subject = f"Your appointment is confirmed - {appointment.service_title}"
        text = (
            f"Hello {appointment.first_name},\n\n"
            f"Your appointment for {appointment.service_title} is confirmed for {_when(appointment)}.\n\n"
            f"{settings.EMAIL_FROM_NAME}"
        )
        html = f"""
        <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
                <h2>Appointment confirmed</h2>
                <p>Hello {appointment.first_name},</p>
                <p>Your appointment for <strong>{appointment.service_title}</strong>
                   is confirmed for <strong>{_when(appointment)}</strong>.</p>
                <p>If you need to cancel, please contact us.</p>
                <p>{settings.EMAIL_FROM_NAME}</p>
            </body>
        </html>
        """
        return self._send(appointment.email, subject, html, text)

    def send_admin_notification(self, appointment: Appointment) -> bool:
        if not self.admin_email:
            logger.info("ADMIN_EMAIL not set, skipping admin notification")
            return False

        subject = f"New booking: {appointment.full_name} - {_when(appointment)}"
        text = (
            f"New booking {appointment.id}\n"
            f"Service: {appointment.service_title}\n"
            f"When: {_when(appointment)}\n"
            f"Customer: {appointment.full_name} <{appointment.email}>, {appointment.phone_number}\n"
            f"Special requests: {appointment.special_requests or '-'}\n"
            f"Message: {appointment.message or '-'}"
        )
        html = f"""
        <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
                <h2>New booking</h2>
                <ul>
                    <li><strong>Service:</strong> {appointment.service_title}</li>
                    <li><strong>When:</strong> {_when(appointment)}</li>
                    <li><strong>Customer:</strong> {appointment.full_name}</li>
                    <li><strong>Email:</strong> {appointment.email}</li>
                    <li><strong>Phone:</strong> {appointment.phone_number}</li>
                    <li><strong>Special requests:</strong> {appointment.special_requests or '-'}</li>
                    <li><strong>Message:</strong> {appointment.message or '-'}</li>
                </ul>
            </body>
        </html>
        """
        return self._send(self.admin_email, subject, html, text)

    def send_reminder(self, appointment: Appointment) -> bool:
        subject = f"Reminder: your appointment tomorrow at {appointment.appointment_time}"
        text = (
            f"Hello {appointment.first_name},\n\n"
            f"This is a reminder of your appointment for {appointment.service_title} "
            f"on {_when(appointment)}.\n\n"
            f"{settings.EMAIL_FROM_NAME}"
        )
        html = f"""
        <html>
            <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
                <h2>See you tomorrow</h2>
                <p>Hello {appointment.first_name},</p>
                <p>This is a reminder of your appointment for <strong>{appointment.service_title}</strong>
                   on <strong>{_when(appointment)}</strong>.</p>
                <p>{settings.EMAIL_FROM_NAME}</p>
            </body>
        </html>
        """
        return self._send(appointment.email, subject, html, text)
