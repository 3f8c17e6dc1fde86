# ============================================================================
# FILE: app/api/v1/public/appointments.py
# Customer booking endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from uuid import UUID

from app.api.dependencies import get_clock, get_notifier
from app.config.database import get_db
from app.schemas.booking import BookingCreateRequest, BookingCreateResponse
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.appointment.appointment_service import AppointmentService
from app.services.availability.availability_service import AvailabilityService
from app.utils.timezone import anchored_date

router = APIRouter(prefix="/appointments")


@router.post("", status_code=201, response_model=BookingCreateResponse)
async def create_booking(
        request: BookingCreateRequest,
        db: Session = Depends(get_db),
        notifier=Depends(get_notifier),
        clock=Depends(get_clock)
):
    """
    Book a slot.
    Fails with 409 SLOT_ALREADY_BOOKED when someone else holds the slot;
    re-query /available-slots and pick another time.
    """
    service = AppointmentService(db, notifier=notifier, clock=clock)
    result = service.create_booking(
        date=request.date,
        time=request.time,
        email=request.email,
        payload=request.payload()
    )

    return {
        "success": True,
        "message": "Appointment booked successfully",
        "appointment": AppointmentQueryService.serialize(result.appointment),
        "warnings": result.warnings
    }


@router.get("/booked-slots")
async def get_booked_slots(
        date: str = Query(..., description="Calendar date, YYYY-MM-DD"),
        db: Session = Depends(get_db)
):
    """Slots already taken on a date."""
    booked = AvailabilityService.get_booked_slots(db, date)
    return {"success": True, "date": anchored_date(date).isoformat(), "booked_slots": booked}


@router.get("/{appointment_id}")
async def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    return AppointmentQueryService.get_appointment(db, appointment_id)


@router.patch("/{appointment_id}/cancel")
async def cancel_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    """Cancel a booking; its slot becomes bookable again."""
    appointment = AppointmentService(db).cancel(appointment_id)
    return {
        "success": True,
        "message": "Appointment cancelled",
        "appointment": AppointmentQueryService.serialize(appointment)
    }
