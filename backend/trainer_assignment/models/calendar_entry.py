"""Externally visible calendar entries mirrored from assigned sessions."""

from sqlalchemy import JSON, Column, Date, DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class CalendarEntry(Base):
    """
    Read-side copy of a purchase session for student and trainer calendars.

    Written after the assignment commit, so it may lag behind or miss
    sessions; ``purchase_session_id`` makes re-syncing idempotent.
    """

    __tablename__ = "calendar_entries"
    __table_args__ = (
        UniqueConstraint("purchase_session_id", name="uq_calendar_entries_purchase_session"),
    )

    id = Column(String(26), primary_key=True, default=generate_ulid)
    purchase_session_id = Column(String(26), nullable=False)
    purchase_id = Column(String(26), nullable=False, index=True)
    trainer_id = Column(String(64), nullable=False, index=True)
    student_id = Column(String(64), nullable=False, index=True)
    course_id = Column(String(64), nullable=False)

    scheduled_date = Column(Date, nullable=False)
    scheduled_time = Column(String(5), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    session_type = Column(String(10), nullable=False)
    status = Column(String(20), nullable=False)
    student_latitude = Column(Float, nullable=False)
    student_longitude = Column(Float, nullable=False)
    booking_metadata = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
