# ============================================================================
# app/services/blocked_date/date_exception_service.py
# Per-date overrides of the weekly schedule ("blocked dates")
# ============================================================================
import logging
from typing import Dict, List, Optional, Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.availability import DateException
from app.services.exceptions import DuplicateDateError, DateExceptionNotFoundError
from app.utils.time_slots import sort_time_slots, find_slot
from app.utils.timezone import DateInput, anchored_date

logger = logging.getLogger(__name__)


class DateExceptionService:
    """Creates, edits and looks up blocked dates."""

    @staticmethod
    def get(db: Session, exception_id: UUID) -> DateException:
        """Fetch one blocked date or raise DateExceptionNotFoundError."""
        record = db.query(DateException).filter(DateException.id == exception_id).first()
        if not record:
            raise DateExceptionNotFoundError(exception_id)
        return record

    @staticmethod
    def find_for_date(db: Session, value: DateInput, active_only: bool = True) -> Optional[DateException]:
        """The blocked date covering a client-submitted date, if any."""
        query = db.query(DateException).filter(DateException.exception_date == anchored_date(value))
        if active_only:
            query = query.filter(DateException.is_active.is_(True))
        return query.first()

    @staticmethod
    def list_blocked_dates(db: Session, active_only: bool = False) -> List[DateException]:
        """All blocked dates ordered by date."""
        query = db.query(DateException)
        if active_only:
            query = query.filter(DateException.is_active.is_(True))
        return query.order_by(DateException.exception_date.asc()).all()

    @staticmethod
    def create_block(
            db: Session,
            value: DateInput,
            reason: str = "",
            blocked_time_slots: Optional[List[str]] = None,
            blocked_by: str = "admin"
    ) -> DateException:
        """
        Block a whole date, or only some of its slots.

        Requests for the same business day collide on the anchored date, so a
        second block for that day is rejected with DuplicateDateError; extra
        slots are added through update().
        """
        day = anchored_date(value)
        slots = sort_time_slots(blocked_time_slots or [], field="blocked_time_slots")

        existing = db.query(DateException).filter(DateException.exception_date == day).first()
        if existing:
            raise DuplicateDateError(day.isoformat(), existing.id)

        record = DateException(
            exception_date=day,
            reason=reason or "",
            blocked_by=blocked_by,
            is_active=True,
            is_full_day_blocked=not slots,
            blocked_time_slots=slots,
        )
        db.add(record)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateDateError(day.isoformat())

        db.refresh(record)
        logger.info(
            f"✅ Date blocked: {day.isoformat()} "
            + ("(Full Day)" if record.is_full_day_blocked else f"(Slots: {', '.join(slots)})")
        )
        return record

    @staticmethod
    def bulk_block(
            db: Session,
            values: List[DateInput],
            reason: str = "",
            blocked_time_slots: Optional[List[str]] = None
    ) -> Dict[str, List[str]]:
        """Block several dates; dates that are already blocked are skipped."""
        sort_time_slots(blocked_time_slots or [], field="blocked_time_slots")
        days = [anchored_date(value) for value in values]

        results = {"blocked": [], "skipped": []}
        for day in days:
            try:
                DateExceptionService.create_block(db, day, reason, blocked_time_slots)
                results["blocked"].append(day.isoformat())
            except DuplicateDateError:
                results["skipped"].append(day.isoformat())

        logger.info(f"✅ Bulk dates blocked: {len(results['blocked'])}, skipped: {len(results['skipped'])}")
        return results

    @staticmethod
    def toggle_active(db: Session, exception_id: UUID) -> DateException:
        """Flip is_active without deleting the record."""
        record = DateExceptionService.get(db, exception_id)
        record.is_active = not record.is_active
        db.commit()
        db.refresh(record)

        logger.info(f"✅ Blocked date toggled: {record.exception_date} active={record.is_active}")
        return record

    @staticmethod
    def update(
            db: Session,
            exception_id: UUID,
            reason: Optional[str] = None,
            is_active: Optional[bool] = None,
            blocked_time_slots: Optional[List[str]] = None
    ) -> DateException:
        """
        Edit a blocked date in place.

        Passing blocked_time_slots replaces the slot set: an empty list turns
        the record into a full-day block, a non-empty one into a partial block.
        """
        record = DateExceptionService.get(db, exception_id)
        slots = None
        if blocked_time_slots is not None:
            slots = sort_time_slots(blocked_time_slots, field="blocked_time_slots")

        if reason is not None:
            record.reason = reason
        if is_active is not None:
            record.is_active = is_active
        if slots is not None:
            record.blocked_time_slots = slots
            record.is_full_day_blocked = not slots

        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def remove_slot(db: Session, exception_id: UUID, slot: str) -> DateException:
        """
        Unblock one slot of a blocked date.

        A partial block whose last slot is removed stays as an inert record
        (it blocks nothing until slots are added back). A slot that is not in
        the record is ignored.
        """
        record = DateExceptionService.get(db, exception_id)
        current = list(record.blocked_time_slots or [])
        match = find_slot(current, slot)

        if match is None:
            logger.info(f"Slot {slot} not blocked on {record.exception_date}, nothing to remove")
            return record

        current.remove(match)
        record.blocked_time_slots = current
        db.commit()
        db.refresh(record)

        if not current and not record.is_full_day_blocked:
            logger.info(f"Last blocked slot removed from {record.exception_date}; record left inert")
        return record

    @staticmethod
    def delete(db: Session, exception_id: UUID) -> None:
        """Remove a blocked date entirely."""
        record = DateExceptionService.get(db, exception_id)
        removed_date = record.exception_date
        db.delete(record)
        db.commit()
        logger.info(f"✅ Blocked date removed: {removed_date}")

    @staticmethod
    def check_date(db: Session, value: DateInput) -> Dict[str, Any]:
        """Blocking status of one date, considering only active records."""
        record = DateExceptionService.find_for_date(db, value, active_only=True)
        return {
            "date": anchored_date(value).isoformat(),
            "is_blocked": record is not None,
            "is_full_day_blocked": bool(record and record.is_full_day_blocked),
            "blocked_time_slots": list(record.blocked_time_slots or []) if record else [],
            "data": record.to_dict() if record else None,
        }

    @staticmethod
    def active_summary(db: Session) -> List[Dict[str, Any]]:
        """Active blocked dates in the compact form the booking calendar uses."""
        return [
            {
                "date": record.exception_date.isoformat(),
                "is_full_day_blocked": record.is_full_day_blocked,
                "blocked_time_slots": list(record.blocked_time_slots or []),
            }
            for record in DateExceptionService.list_blocked_dates(db, active_only=True)
        ]
