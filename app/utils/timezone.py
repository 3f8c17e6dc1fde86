# app/utils/timezone.py
"""
Business timezone helpers.

The business operates in one fixed timezone (BUSINESS_TIMEZONE). A calendar
date submitted by a client is anchored to midnight of that date in the
business zone, so a booking made from any client locale, and evaluated on
a server in any process timezone, lands on the same day.
"""
from datetime import date, datetime, time
from typing import Union

import pytz

from app.config.settings import get_settings
from app.services.exceptions import InvalidDateError
from app.utils.time_slots import parse_time_slot, to_business_hour

# Sunday-first, as used by the weekly schedule and the admin screens
DAY_NAMES = (
    "sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday",
)

# Indexed by date.weekday() (Monday == 0)
_WEEKDAY_NAMES = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

DateInput = Union[str, date, datetime]


def business_tz():
    """The business's fixed timezone."""
    return pytz.timezone(get_settings().BUSINESS_TIMEZONE)


def _calendar_date(value: DateInput) -> date:
    """Extract the calendar date the client meant, as written."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateError(value)

    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # For offset-bearing timestamps this is the date in the client's offset
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidDateError(value)


def anchor(value: DateInput) -> datetime:
    """Midnight of the given calendar date in the business timezone."""
    calendar_date = _calendar_date(value)
    return business_tz().localize(datetime.combine(calendar_date, time.min))


def anchored_date(value: DateInput) -> date:
    """The business calendar date for a client-submitted date."""
    return anchor(value).date()


def day_of_week(instant: Union[date, datetime]) -> str:
    """Day name of an instant, evaluated in the business timezone."""
    if isinstance(instant, datetime) and instant.tzinfo is not None:
        instant = instant.astimezone(business_tz())
    return _WEEKDAY_NAMES[instant.weekday()]


def business_now() -> datetime:
    """Current time in the business timezone."""
    return datetime.now(pytz.utc).astimezone(business_tz())


def business_today() -> date:
    """Today's calendar date in the business timezone."""
    return business_now().date()


def slot_start(slot_date: date, slot: str) -> datetime:
    """The business-local instant at which a slot on a date begins."""
    hour, minute = parse_time_slot(slot)
    naive = datetime.combine(slot_date, time(to_business_hour(hour), minute))
    return business_tz().localize(naive)
