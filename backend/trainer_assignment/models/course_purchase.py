# backend/trainer_assignment/models/course_purchase.py
"""
Course purchase model.

A purchase is one tutoring contract and the record of exactly one
assignment attempt. Only ``status`` and ``assigned_trainer_id`` describe the
outcome; every other column is a snapshot of the request.
"""

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.enums import PurchaseStatus
from ..core.ulid_helper import generate_ulid
from ..database import Base


class CoursePurchase(Base):
    """Persisted tutoring contract and its assignment outcome."""

    __tablename__ = "course_purchases"
    __table_args__ = (
        UniqueConstraint("external_booking_id", name="uq_course_purchases_external_booking_id"),
        CheckConstraint(
            "class_type IN ('ONE_ON_ONE', 'ONE_ON_TWO', 'ONE_ON_THREE', 'HYBRID')",
            name="ck_course_purchases_class_type",
        ),
        CheckConstraint(
            "delivery_mode IN ('WEEKDAY_DAILY', 'SUNDAY_ONLY')",
            name="ck_course_purchases_delivery_mode",
        ),
        CheckConstraint(
            "status IN ('ASSIGNED', 'WAITLISTED', 'SERVICE_NOT_AVAILABLE', 'INVALID_PURCHASE')",
            name="ck_course_purchases_status",
        ),
        Index("ix_course_purchases_status", "status"),
        Index("ix_course_purchases_trainer", "assigned_trainer_id"),
    )

    id = Column(String(26), primary_key=True, default=generate_ulid)
    external_booking_id = Column(String(64), nullable=False)
    course_id = Column(String(64), nullable=False, index=True)

    class_type = Column(String(20), nullable=False)
    # Stored as requested; the validator rejects anything outside 10/20/30
    total_sessions = Column(Integer, nullable=False)
    delivery_mode = Column(String(20), nullable=False)
    start_date = Column(Date, nullable=False)
    preferred_time_slot = Column(String(5), nullable=False)

    student_latitude = Column(Float, nullable=False)
    student_longitude = Column(Float, nullable=False)
    students = Column(JSON, nullable=False, default=list)

    # Resolved operator context: NULL franchise means company-operated
    operator_franchise_id = Column(String(64), nullable=True)
    zone_id = Column(String(26), nullable=True)

    assigned_trainer_id = Column(String(64), nullable=True)
    status = Column(String(30), nullable=False, default=PurchaseStatus.WAITLISTED.value)
    status_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    sessions = relationship(
        "PurchaseSession",
        back_populates="purchase",
        order_by="PurchaseSession.session_number",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<CoursePurchase {self.id} booking={self.external_booking_id} status={self.status}>"
