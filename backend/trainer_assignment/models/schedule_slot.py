"""
Schedule slot ledger.

One row per (trainer, date, timeslot). The unique constraint is the only
authoritative guard against double-booking; eligibility checks that read
this table are advisory until the insert succeeds.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from ..core.enums import SlotStatus
from ..core.ulid_helper import generate_ulid
from ..database import Base

SLOT_UNIQUE_CONSTRAINT = "uq_schedule_slots_trainer_date_timeslot"


class ScheduleSlot(Base):
    """Occupancy record for a trainer's calendar cell."""

    __tablename__ = "schedule_slots"
    __table_args__ = (
        UniqueConstraint("trainer_id", "slot_date", "timeslot", name=SLOT_UNIQUE_CONSTRAINT),
        CheckConstraint(
            "status IN ('available', 'booked', 'blocked')", name="ck_schedule_slots_status"
        ),
        Index("ix_schedule_slots_booking", "booking_id"),
        Index("ix_schedule_slots_slot_date", "slot_date"),
    )

    id = Column(String(26), primary_key=True, default=generate_ulid)
    trainer_id = Column(String(64), nullable=False, index=True)
    booking_id = Column(String(64), nullable=True)
    slot_date = Column(Date, nullable=False)
    timeslot = Column(String(5), nullable=False)
    status = Column(String(20), nullable=False, default=SlotStatus.AVAILABLE.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<ScheduleSlot {self.trainer_id} {self.slot_date} {self.timeslot} {self.status}>"
