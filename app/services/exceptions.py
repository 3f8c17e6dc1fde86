# app/services/exceptions.py
"""
Booking Service Exceptions

Typed errors raised by the scheduling and booking services. Each carries a
machine-readable code and the HTTP status the API layer reports it with.
"""

from typing import Optional, Dict, Any


class BookingServiceError(Exception):
    """Base exception for booking service errors."""

    status_code = 400

    def __init__(
        self,
        message: str,
        code: str = "BOOKING_SERVICE_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "success": False,
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# ============================================================================
# Validation errors - rejected before any write
# ============================================================================

class BookingValidationError(BookingServiceError):
    """Raised when request data fails validation."""

    status_code = 422

    def __init__(
        self,
        message: str,
        field: str = None,
        code: str = "VALIDATION_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, code=code, details=error_details)


class InvalidDayError(BookingValidationError):
    """Raised when a day name is not one of the seven recognized days."""

    def __init__(self, day: str, valid_days=None):
        details = {"day": day}
        if valid_days:
            details["valid_days"] = list(valid_days)
        super().__init__(
            message=f"Invalid day: {day}",
            field="day",
            code="INVALID_DAY",
            details=details,
        )


class InvalidTimeFormatError(BookingValidationError):
    """Raised when a time slot string cannot be parsed."""

    def __init__(self, value: Any, field: str = "time_slots"):
        super().__init__(
            message=f"Invalid time format: {value!r} (expected H:MM or HH:MM)",
            field=field,
            code="INVALID_TIME_FORMAT",
            details={"value": value},
        )


class InvalidDateError(BookingValidationError):
    """Raised when a date string cannot be interpreted as a calendar date."""

    def __init__(self, value: Any, field: str = "date"):
        super().__init__(
            message=f"Invalid date: {value!r}",
            field=field,
            code="INVALID_DATE",
            details={"value": value},
        )


class InvalidStatusError(BookingValidationError):
    """Raised when a booking status is not recognized."""

    def __init__(self, status: Any, valid_statuses=None):
        details = {"status": status}
        if valid_statuses:
            details["valid_statuses"] = list(valid_statuses)
        super().__init__(
            message=f"Invalid status: {status!r}",
            field="status",
            code="INVALID_STATUS",
            details=details,
        )


class SlotNotOfferedError(BookingValidationError):
    """Raised when the requested time is not offered on the requested date."""

    def __init__(self, date: str, time_slot: str, reason: str):
        super().__init__(
            message=f"Time slot {time_slot} is not offered on {date}: {reason}",
            field="time",
            code="SLOT_NOT_OFFERED",
            details={"date": date, "time": time_slot, "reason": reason},
        )


class BookingWindowError(BookingValidationError):
    """Raised when a slot is too soon or too far ahead to be booked."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            field="date",
            code="OUTSIDE_BOOKING_WINDOW",
            details=details,
        )


class BookingDisabledError(BookingServiceError):
    """Raised when online booking is switched off."""

    status_code = 403

    def __init__(self):
        super().__init__(
            message="Online booking is currently disabled",
            code="BOOKING_DISABLED",
        )


# ============================================================================
# Not-found errors
# ============================================================================

class NotFoundError(BookingServiceError):
    """Raised when a requested record does not exist."""

    status_code = 404

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            message=f"{resource} not found: {resource_id}",
            code="NOT_FOUND",
            details={"resource": resource, "id": str(resource_id)},
        )


class DateExceptionNotFoundError(NotFoundError):
    """Raised when a blocked date does not exist."""

    def __init__(self, exception_id: Any):
        super().__init__("Blocked date", exception_id)


class AppointmentNotFoundError(NotFoundError):
    """Raised when an appointment does not exist."""

    def __init__(self, appointment_id: Any):
        super().__init__("Appointment", appointment_id)


# ============================================================================
# Conflict errors - caller should re-query rather than retry blindly
# ============================================================================

class ConflictError(BookingServiceError):
    """Raised when a write collides with existing state."""

    status_code = 409


class SlotAlreadyBookedError(ConflictError):
    """Raised when the (date, time) slot already has an active booking."""

    def __init__(self, date: str, time_slot: str):
        super().__init__(
            message=f"Time slot {time_slot} on {date} is already booked",
            code="SLOT_ALREADY_BOOKED",
            details={"date": date, "time": time_slot},
        )


class DuplicateDateError(ConflictError):
    """Raised when a blocked date already exists for the anchored date."""

    def __init__(self, date: str, existing_id: Any = None):
        details = {"date": date}
        if existing_id is not None:
            details["existing_id"] = str(existing_id)
        super().__init__(
            message=f"Date {date} is already blocked",
            code="DUPLICATE_DATE",
            details=details,
        )
