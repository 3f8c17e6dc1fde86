from sqlalchemy import Column, String, Integer, Boolean, Date, DateTime, JSON, Uuid
from sqlalchemy.sql import func
from app.models.base import Base
import uuid


class DaySchedule(Base):
    """Default recurring availability for one day of the week"""
    __tablename__ = "day_schedules"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    day_of_week = Column(String(10), nullable=False, unique=True)  # sunday..saturday
    is_working = Column(Boolean, nullable=False, default=False)
    time_slots = Column(JSON, nullable=False, default=list)  # business-sorted "H:MM" strings

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "is_working": self.is_working,
            "time_slots": list(self.time_slots or []),
        }


class BookingSettings(Base):
    """Business-wide booking switches (singleton row)"""
    __tablename__ = "booking_settings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    settings_type = Column(String(20), nullable=False, unique=True, default="booking")

    min_advance_booking_hours = Column(Integer, nullable=False, default=24)
    max_advance_booking_days = Column(Integer, nullable=False, default=30)
    is_booking_enabled = Column(Boolean, nullable=False, default=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self):
        return {
            "min_advance_booking_hours": self.min_advance_booking_hours,
            "max_advance_booking_days": self.max_advance_booking_days,
            "is_booking_enabled": self.is_booking_enabled,
        }


class DateException(Base):
    """Override of the weekly schedule for one calendar date (holiday, time off)"""
    __tablename__ = "date_exceptions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Anchored business calendar date; one record per date
    exception_date = Column(Date, nullable=False, unique=True, index=True)
    reason = Column(String(255), nullable=False, default="")
    blocked_by = Column(String(100), nullable=False, default="admin")

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_full_day_blocked = Column(Boolean, nullable=False, default=True)
    blocked_time_slots = Column(JSON, nullable=False, default=list)  # ignored when full-day

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def effective_blocked_slots(self):
        """Slots this record removes; None means the whole day"""
        if self.is_full_day_blocked:
            return None
        return list(self.blocked_time_slots or [])

    def to_dict(self):
        return {
            "id": str(self.id),
            "date": self.exception_date.isoformat(),
            "reason": self.reason,
            "blocked_by": self.blocked_by,
            "is_active": self.is_active,
            "is_full_day_blocked": self.is_full_day_blocked,
            "blocked_time_slots": list(self.blocked_time_slots or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
