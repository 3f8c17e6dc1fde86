# ============================================================================
# app/services/schedule/schedule_service.py
# Weekly schedule and booking settings - no FastAPI dependencies
# ============================================================================
import logging
from typing import Dict, List, Optional, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.models.availability import DaySchedule, BookingSettings
from app.services.exceptions import InvalidDayError, BookingValidationError
from app.utils.time_slots import sort_time_slots
from app.utils.timezone import DAY_NAMES

logger = logging.getLogger(__name__)

NON_WORKING_BY_DEFAULT = ("sunday", "saturday")
DEFAULT_MIN_ADVANCE_HOURS = 24
DEFAULT_MAX_ADVANCE_DAYS = 30


class ScheduleService:
    """Reads and edits the default weekly availability template."""

    @staticmethod
    def normalize_day(day: str) -> str:
        """Lower-case a day name, rejecting anything outside sunday..saturday."""
        name = (day or "").strip().lower()
        if name not in DAY_NAMES:
            raise InvalidDayError(day, DAY_NAMES)
        return name

    @staticmethod
    def _default_day(day: str) -> DaySchedule:
        if day in NON_WORKING_BY_DEFAULT:
            return DaySchedule(day_of_week=day, is_working=False, time_slots=[])
        default_slots = sort_time_slots(get_settings().DEFAULT_TIME_SLOTS)
        return DaySchedule(day_of_week=day, is_working=True, time_slots=default_slots)

    @staticmethod
    def _load_days(db: Session, persist: bool = False) -> Dict[str, DaySchedule]:
        """
        Return all seven day rows, filling in any that are missing.

        A store that was never configured is seeded with the default working
        week; a day missing from an otherwise configured week is added as not
        working with no slots. Filled-in rows are only written when persist
        is set, so reads never touch the store.
        """
        rows = {row.day_of_week: row for row in db.query(DaySchedule).all()}
        missing = [day for day in DAY_NAMES if day not in rows]
        if not missing:
            return rows

        first_access = not rows
        for day in missing:
            if first_access:
                row = ScheduleService._default_day(day)
            else:
                row = DaySchedule(day_of_week=day, is_working=False, time_slots=[])
            rows[day] = row
            if persist:
                db.add(row)

        if not persist:
            return rows

        try:
            db.commit()
            logger.info(f"Seeded weekly schedule days: {', '.join(missing)}")
        except IntegrityError:
            # Another request seeded concurrently; use its rows
            db.rollback()
            rows = {row.day_of_week: row for row in db.query(DaySchedule).all()}

        return rows

    @staticmethod
    def get_schedule(db: Session) -> Dict[str, Dict[str, Any]]:
        """Full weekly schedule, always containing all seven days (sunday first)."""
        rows = ScheduleService._load_days(db)
        return {day: rows[day].to_dict() for day in DAY_NAMES}

    @staticmethod
    def get_day(db: Session, day: str) -> DaySchedule:
        """Schedule row for one day name."""
        name = ScheduleService.normalize_day(day)
        return ScheduleService._load_days(db)[name]

    @staticmethod
    def update_day(
            db: Session,
            day: str,
            is_working: Optional[bool] = None,
            time_slots: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """
        Replace one day's schedule.

        Omitted fields keep their stored value. Slots are validated,
        deduplicated and business-sorted before anything is written; one
        malformed slot rejects the whole update.
        """
        name = ScheduleService.normalize_day(day)
        sorted_slots = sort_time_slots(time_slots) if time_slots is not None else None

        row = ScheduleService._load_days(db, persist=True)[name]
        if is_working is not None:
            row.is_working = is_working
        if sorted_slots is not None:
            row.time_slots = sorted_slots

        db.commit()
        db.refresh(row)

        logger.info(f"✅ {name} schedule updated: working={row.is_working}, slots={row.time_slots}")
        return row.to_dict()

    # ------------------------------------------------------------------
    # Booking settings
    # ------------------------------------------------------------------

    @staticmethod
    def _default_settings() -> BookingSettings:
        return BookingSettings(
            settings_type="booking",
            min_advance_booking_hours=DEFAULT_MIN_ADVANCE_HOURS,
            max_advance_booking_days=DEFAULT_MAX_ADVANCE_DAYS,
            is_booking_enabled=True,
        )

    @staticmethod
    def get_booking_settings(db: Session) -> BookingSettings:
        """The singleton settings row; unsaved defaults if never configured."""
        settings_row = db.query(BookingSettings).filter_by(settings_type="booking").first()
        return settings_row or ScheduleService._default_settings()

    @staticmethod
    def update_booking_settings(
            db: Session,
            min_advance_booking_hours: Optional[int] = None,
            max_advance_booking_days: Optional[int] = None,
            is_booking_enabled: Optional[bool] = None
    ) -> BookingSettings:
        """Update the booking window and the online-booking switch."""
        if min_advance_booking_hours is not None and min_advance_booking_hours < 0:
            raise BookingValidationError(
                "min_advance_booking_hours must be >= 0", field="min_advance_booking_hours"
            )
        if max_advance_booking_days is not None and max_advance_booking_days < 1:
            raise BookingValidationError(
                "max_advance_booking_days must be >= 1", field="max_advance_booking_days"
            )

        settings_row = ScheduleService.get_booking_settings(db)
        db.add(settings_row)
        if min_advance_booking_hours is not None:
            settings_row.min_advance_booking_hours = min_advance_booking_hours
        if max_advance_booking_days is not None:
            settings_row.max_advance_booking_days = max_advance_booking_days
        if is_booking_enabled is not None:
            settings_row.is_booking_enabled = is_booking_enabled

        db.commit()
        db.refresh(settings_row)
        logger.info("✅ Booking settings updated")
        return settings_row
