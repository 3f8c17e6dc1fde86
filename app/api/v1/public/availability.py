# ============================================================================
# FILE: app/api/v1/public/availability.py
# Booking calendar reads - no authentication
# ============================================================================
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.schemas.schedule import AvailableSlotsResponse, BlockedDateCheckResponse, WeeklyScheduleResponse
from app.services.availability.availability_service import AvailabilityService
from app.services.blocked_date.date_exception_service import DateExceptionService
from app.services.schedule.schedule_service import ScheduleService

router = APIRouter()


@router.get("/schedule", response_model=WeeklyScheduleResponse)
async def get_schedule(db: Session = Depends(get_db)):
    """Weekly schedule with all seven days."""
    return {"success": True, "schedule": ScheduleService.get_schedule(db)}


@router.get("/available-slots/{date}", response_model=AvailableSlotsResponse)
async def get_available_slots(
        date: str = Path(..., description="Calendar date, YYYY-MM-DD"),
        db: Session = Depends(get_db)
):
    """
    Bookable slots on a date.
    Weekly schedule minus blocked slots minus slots already booked.
    """
    return {"success": True, **AvailabilityService.resolve_day(db, date).to_dict()}


@router.get("/blocked-dates/active")
async def get_active_blocked_dates(db: Session = Depends(get_db)):
    """Active blocked dates, for greying out the booking calendar."""
    blocked = DateExceptionService.active_summary(db)
    return {"success": True, "count": len(blocked), "blocked_dates": blocked}


@router.get("/blocked-dates/check/{date}", response_model=BlockedDateCheckResponse)
async def check_blocked_date(
        date: str = Path(..., description="Calendar date, YYYY-MM-DD"),
        db: Session = Depends(get_db)
):
    return DateExceptionService.check_date(db, date)
