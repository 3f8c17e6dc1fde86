# app/utils/time_slots.py
"""
Time slot parsing and business ordering.

Staff enter slots as free-form "H:MM" / "HH:MM" strings and write afternoon
times without a PM marker ("2:30" means 14:30). Every place that needs to
compare or order slots goes through this module so the convention can be
replaced in one spot.
"""
import re
from typing import Iterable, List, Optional, Tuple

from app.services.exceptions import InvalidTimeFormatError

# The business day never starts before this hour, so a lower literal hour
# is afternoon/evening shorthand.
PM_SHORTHAND_CUTOFF_HOUR = 7

_TIME_SLOT_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time_slot(value: str, field: str = "time_slots") -> Tuple[int, int]:
    """Parse a slot string into (hour, minute) as written."""
    if not isinstance(value, str):
        raise InvalidTimeFormatError(value, field=field)

    match = _TIME_SLOT_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeFormatError(value, field=field)

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidTimeFormatError(value, field=field)
    return hour, minute


def to_business_hour(hour: int) -> int:
    """Apply the PM shorthand: hours before the cutoff are afternoon hours."""
    return hour + 12 if hour < PM_SHORTHAND_CUTOFF_HOUR else hour


def business_minutes(value: str, field: str = "time_slots") -> int:
    """Minutes since midnight of a slot under the business convention."""
    hour, minute = parse_time_slot(value, field=field)
    return to_business_hour(hour) * 60 + minute


def slot_key(value: str, field: str = "time_slots") -> str:
    """
    Canonical "HH:MM" form of a slot in business time.

    "2:30", "14:30" and "02:30" all map to "14:30". Occupancy rows store this
    form so the unique slot constraint sees one key per real start time.
    """
    hours, minutes = divmod(business_minutes(value, field=field), 60)
    return f"{hours:02d}:{minutes:02d}"


def sort_time_slots(slots: Iterable[str], field: str = "time_slots") -> List[str]:
    """
    Validate, deduplicate and order slots by business time.

    The whole list is rejected if any entry is malformed. Spellings of the
    same business time ("9:00" and "09:00", "2:30" and "14:30") count as
    duplicates; the first one is kept.
    """
    seen = set()
    unique = []
    for slot in slots:
        minutes = business_minutes(slot, field=field)
        if minutes in seen:
            continue
        seen.add(minutes)
        unique.append(slot.strip())

    return sorted(unique, key=business_minutes)


def same_slot(a: str, b: str) -> bool:
    """True when two slot strings denote the same time; malformed never match."""
    try:
        return business_minutes(a) == business_minutes(b)
    except InvalidTimeFormatError:
        return False


def find_slot(candidates: Iterable[str], value: str) -> Optional[str]:
    """Return the candidate spelled like the stored slot that matches value."""
    for candidate in candidates:
        if same_slot(candidate, value):
            return candidate
    return None


def subtract_slots(slots: Iterable[str], removed: Iterable[str]) -> List[str]:
    """Slots (in their given order) that do not match any removed slot."""
    removed = list(removed)
    return [slot for slot in slots if find_slot(removed, slot) is None]
