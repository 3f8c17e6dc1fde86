# ============================================================================
# FILE 3: app/api/v1/dashboard/appointments.py
# Admin booking management - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID

from app.config.database import get_db
from app.schemas.booking import BookingStatusUpdateRequest
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.appointment.appointment_service import AppointmentService
from app.services.appointment.reconciliation_service import LedgerReconciler

router = APIRouter(prefix="/appointments")


@router.get("")
async def list_appointments(
        start_date: Optional[date] = Query(None, description="Filter appointments on or after this date"),
        end_date: Optional[date] = Query(None, description="Filter appointments on or before this date"),
        status: Optional[str] = Query(None, description="Filter by status (pending, confirmed, cancelled, completed)"),
        email: Optional[str] = Query(None, description="Filter by customer email"),
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(50, ge=1, le=100, description="Number of records to return"),
        db: Session = Depends(get_db)
):
    """Get a list of all appointments."""
    return AppointmentQueryService.list_appointments(
        db=db,
        start_date=start_date,
        end_date=end_date,
        status=status,
        email=email,
        skip=skip,
        limit=limit
    )


@router.post("/reconcile")
async def reconcile_ledger(db: Session = Depends(get_db)):
    """
    Run the appointment/slot consistency sweep now.
    The same sweep runs periodically in the worker.
    """
    report = LedgerReconciler(db).run()
    return {"success": True, "report": report.to_dict()}


@router.get("/{appointment_id}")
async def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    """Get detailed information about a specific appointment."""
    return AppointmentQueryService.get_appointment(db, appointment_id)


@router.patch("/{appointment_id}/status")
async def update_appointment_status(
        request: BookingStatusUpdateRequest,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    appointment = AppointmentService(db).update_status(appointment_id, request.status)
    return {
        "success": True,
        "message": f"Appointment status updated to {appointment.status}",
        "appointment": AppointmentQueryService.serialize(appointment)
    }


@router.delete("/{appointment_id}")
async def delete_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db)
):
    """Delete a booking and free its slot."""
    AppointmentService(db).delete_booking(appointment_id)
    return {"success": True, "message": "Appointment deleted"}
