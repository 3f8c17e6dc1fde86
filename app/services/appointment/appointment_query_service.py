# ============================================================================
# app/services/appointment/appointment_query_service.py
# Read-side of the booking ledger - no FastAPI dependencies
# ============================================================================
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional, Dict, Any
from uuid import UUID

from app.models.appointment import Appointment
from app.services.exceptions import AppointmentNotFoundError


class AppointmentQueryService:
    """Service layer for listing and reading appointments."""

    @staticmethod
    def list_appointments(
            db: Session,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            status: Optional[str] = None,
            email: Optional[str] = None,
            skip: int = 0,
            limit: int = 50
    ) -> Dict[str, Any]:
        """Get paginated list of appointments with filters."""
        query = db.query(Appointment)

        if start_date:
            query = query.filter(Appointment.appointment_date >= start_date)
        if end_date:
            query = query.filter(Appointment.appointment_date <= end_date)
        if status:
            query = query.filter(Appointment.status == status.lower())
        if email:
            query = query.filter(Appointment.email == email.strip().lower())

        query = query.order_by(Appointment.appointment_date.asc(), Appointment.created_at.asc())
        total = query.count()
        appointments = query.offset(skip).limit(limit).all()

        return {
            "total_appointments": total,
            "page": {
                "skip": skip,
                "limit": limit,
                "total_pages": (total + limit - 1) // limit if total > 0 else 0
            },
            "filters": {
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
                "status": status,
                "email": email
            },
            "appointments": [AppointmentQueryService.serialize(appt) for appt in appointments]
        }

    @staticmethod
    def get_appointment(db: Session, appointment_id: UUID) -> Dict[str, Any]:
        """Get a single appointment by ID."""
        appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise AppointmentNotFoundError(appointment_id)
        return AppointmentQueryService.serialize(appointment, detailed=True)

    @staticmethod
    def serialize(appointment: Appointment, detailed: bool = False) -> Dict[str, Any]:
        """Convert Appointment model to dictionary."""
        base = {
            "id": str(appointment.id),
            "service_id": appointment.service_id,
            "service_title": appointment.service_title,
            "date": appointment.appointment_date.isoformat(),
            "day": appointment.appointment_day,
            "time": appointment.appointment_time,
            "first_name": appointment.first_name,
            "last_name": appointment.last_name,
            "email": appointment.email,
            "phone_number": appointment.phone_number,
            "status": appointment.status,
            "created_at": appointment.created_at.isoformat() if appointment.created_at else None,
        }

        if detailed:
            base.update({
                "country": appointment.country,
                "gender": appointment.gender,
                "special_requests": appointment.special_requests,
                "message": appointment.message,
                "holds_slot": appointment.occupancy is not None,
                "reminder_sent_at": appointment.reminder_sent_at.isoformat() if appointment.reminder_sent_at else None,
                "updated_at": appointment.updated_at.isoformat() if appointment.updated_at else None,
            })

        return base
