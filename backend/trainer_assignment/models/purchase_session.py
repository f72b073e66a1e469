"""Scheduled sessions belonging to a course purchase."""

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.enums import SessionStatus
from ..core.ulid_helper import generate_ulid
from ..database import Base


class PurchaseSession(Base):
    """One lesson occurrence, created in a batch with its purchase."""

    __tablename__ = "purchase_sessions"
    __table_args__ = (
        UniqueConstraint("purchase_id", "session_number", name="uq_purchase_sessions_number"),
        CheckConstraint(
            "session_type IN ('online', 'offline')", name="ck_purchase_sessions_session_type"
        ),
        CheckConstraint(
            "status IN ('scheduled', 'completed', 'cancelled', 'rescheduled')",
            name="ck_purchase_sessions_status",
        ),
        CheckConstraint("session_number >= 1", name="ck_purchase_sessions_number_positive"),
        Index("ix_purchase_sessions_date", "session_date"),
    )

    id = Column(String(26), primary_key=True, default=generate_ulid)
    purchase_id = Column(
        String(26), ForeignKey("course_purchases.id", ondelete="CASCADE"), nullable=False
    )
    booking_id = Column(String(64), nullable=False, index=True)
    session_number = Column(Integer, nullable=False)
    session_date = Column(Date, nullable=False)
    session_time = Column(String(5), nullable=False)
    session_type = Column(String(10), nullable=False)
    status = Column(String(20), nullable=False, default=SessionStatus.SCHEDULED.value)
    booking_metadata = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    purchase = relationship("CoursePurchase", back_populates="sessions")

    def __repr__(self) -> str:
        return (
            f"<PurchaseSession {self.purchase_id}#{self.session_number} "
            f"{self.session_date} {self.session_time} {self.session_type}>"
        )
