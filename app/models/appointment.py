from enum import Enum

from sqlalchemy import (
    Column, String, Text, Date, DateTime, ForeignKey, UniqueConstraint, Index, Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.models.base import Base
import uuid


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Statuses that hold a slot
OCCUPYING_STATUSES = (AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value)


class Appointment(Base):
    """Customer-facing booking record"""
    __tablename__ = "appointments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Service info
    service_id = Column(String(64), nullable=True)
    service_title = Column(String(200), nullable=False)

    # Slot (anchored business date + slot string as stored in the schedule)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_day = Column(String(10), nullable=False)
    appointment_time = Column(String(5), nullable=False)

    # Customer info
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone_number = Column(String(30), nullable=False)
    country = Column(String(2), nullable=False, default="BE")
    gender = Column(String(10), nullable=False)

    special_requests = Column(Text, nullable=False, default="")
    message = Column(Text, nullable=False, default="")

    # Status tracking
    status = Column(String(20), nullable=False, default=AppointmentStatus.CONFIRMED.value, index=True)

    # Reminders & notifications
    reminder_sent_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    occupancy = relationship(
        "SlotOccupancy",
        back_populates="appointment",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def occupies_slot(self):
        return self.status in OCCUPYING_STATUSES


class SlotOccupancy(Base):
    """Marks one (date, time) slot as taken by exactly one appointment"""
    __tablename__ = "slot_occupancies"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    appointment_id = Column(
        Uuid,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    slot_date = Column(Date, nullable=False)
    time_slot = Column(String(5), nullable=False)
    status = Column(String(20), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    appointment = relationship("Appointment", back_populates="occupancy")

    __table_args__ = (
        UniqueConstraint("slot_date", "time_slot", name="uq_slot_occupancy_date_time"),
        Index("ix_slot_occupancies_slot_date", "slot_date"),
    )
