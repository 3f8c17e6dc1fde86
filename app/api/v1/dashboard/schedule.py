# ============================================================================
# FILE: app/api/v1/dashboard/schedule.py
# Admin editing of the weekly schedule and booking settings
# ============================================================================
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.schemas.schedule import (
    BookingSettingsResponse,
    BookingSettingsUpdateRequest,
    DayScheduleUpdateRequest,
    WeeklyScheduleResponse,
)
from app.services.schedule.schedule_service import ScheduleService

router = APIRouter(prefix="/schedule")


@router.get("", response_model=WeeklyScheduleResponse)
async def get_schedule(db: Session = Depends(get_db)):
    return {"success": True, "schedule": ScheduleService.get_schedule(db)}


@router.put("/day/{day}")
async def update_day_schedule(
        request: DayScheduleUpdateRequest,
        day: str = Path(..., description="sunday ... saturday"),
        db: Session = Depends(get_db)
):
    """
    Replace one day of the weekly schedule.
    Slots are deduplicated and stored in business order.
    """
    day_schedule = ScheduleService.update_day(
        db,
        day,
        is_working=request.is_working,
        time_slots=request.time_slots
    )
    return {
        "success": True,
        "message": f"{day.lower()} schedule updated",
        "day": day.lower(),
        **day_schedule
    }


@router.get("/settings", response_model=BookingSettingsResponse)
async def get_booking_settings(db: Session = Depends(get_db)):
    return ScheduleService.get_booking_settings(db)


@router.put("/settings", response_model=BookingSettingsResponse)
async def update_booking_settings(
        request: BookingSettingsUpdateRequest,
        db: Session = Depends(get_db)
):
    return ScheduleService.update_booking_settings(
        db,
        min_advance_booking_hours=request.min_advance_booking_hours,
        max_advance_booking_days=request.max_advance_booking_days,
        is_booking_enabled=request.is_booking_enabled
    )
