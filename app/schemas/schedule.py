"""
Pydantic schemas for the weekly schedule, booking settings and blocked dates
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any
import datetime as dt


# ============================================================================
# Request Schemas (for incoming data)
# ============================================================================

class DayScheduleUpdateRequest(BaseModel):
    """Replace one day of the weekly schedule; omitted fields are kept"""
    is_working: Optional[bool] = None
    time_slots: Optional[List[str]] = Field(
        None, description='Slots as "H:MM" or "HH:MM"; hours before 7 are afternoon times'
    )


class BookingSettingsUpdateRequest(BaseModel):
    min_advance_booking_hours: Optional[int] = Field(None, ge=0)
    max_advance_booking_days: Optional[int] = Field(None, ge=1)
    is_booking_enabled: Optional[bool] = None


class BlockDateRequest(BaseModel):
    """Block a whole date, or only the listed slots"""
    date: str = Field(..., description="Calendar date, YYYY-MM-DD or an ISO timestamp")
    reason: str = ""
    blocked_time_slots: List[str] = Field(default_factory=list, description="Empty means full day")


class BulkBlockDatesRequest(BaseModel):
    dates: List[str] = Field(..., min_length=1)
    reason: str = ""
    blocked_time_slots: List[str] = Field(default_factory=list)


class BlockedDateUpdateRequest(BaseModel):
    reason: Optional[str] = None
    is_active: Optional[bool] = None
    blocked_time_slots: Optional[List[str]] = Field(
        None, description="Replaces the blocked slots; empty list blocks the full day"
    )


# ============================================================================
# Response Schemas (for outgoing data)
# ============================================================================

class DayScheduleResponse(BaseModel):
    is_working: bool
    time_slots: List[str]


class WeeklyScheduleResponse(BaseModel):
    success: bool = True
    schedule: Dict[str, DayScheduleResponse]


class BookingSettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    min_advance_booking_hours: int
    max_advance_booking_days: int
    is_booking_enabled: bool


class BlockedDateCheckResponse(BaseModel):
    date: dt.date
    is_blocked: bool
    is_full_day_blocked: bool
    blocked_time_slots: List[str]
    data: Optional[Dict[str, Any]] = None


class AvailableSlotsResponse(BaseModel):
    success: bool = True
    date: dt.date
    day_of_week: str
    is_working_day: bool
    is_full_day_blocked: bool
    all_day_slots: List[str]
    blocked_slots: List[str]
    booked_slots: List[str]
    available_slots: List[str]
