# app/schemas/__init__.py
from .schedule import (
    DayScheduleUpdateRequest,
    BookingSettingsUpdateRequest,
    BlockDateRequest,
    BulkBlockDatesRequest,
    BlockedDateUpdateRequest,
    DayScheduleResponse,
    WeeklyScheduleResponse,
    BookingSettingsResponse,
    BlockedDateCheckResponse,
    AvailableSlotsResponse
)

from .booking import (
    BookingCreateRequest,
    BookingStatusUpdateRequest,
    BookingCreateResponse
)
