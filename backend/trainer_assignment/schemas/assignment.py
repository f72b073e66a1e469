# backend/trainer_assignment/schemas/assignment.py
"""
Assignment request and response schemas.

The request schema only guards types and ranges. Business combinations
(session counts, student counts per class type) are left to the purchase
validator so they end up as an INVALID_PURCHASE row instead of a schema
error.
"""

from datetime import date
import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.enums import ClassType, DeliveryMode, PurchaseStatus
from ..domain.outcome import AssignmentOutcome
from ..domain.value_objects import Coordinates

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_SLOT_REGEX = re.compile(r"^(\d{1,2}):(\d{2})$")


class StudentRef(BaseModel):
    """A student attending the purchased course."""

    id: str = Field(..., min_length=1)
    name: Optional[str] = None


class AutoAssignmentRequest(BaseModel):
    """Input for one auto-assignment attempt."""

    model_config = ConfigDict(extra="forbid")

    external_booking_id: str = Field(..., min_length=1, max_length=64)
    course_id: str = Field(..., min_length=1, max_length=64)
    class_type: ClassType
    total_sessions: int = Field(..., description="Validated by business rules, not here")
    delivery_mode: DeliveryMode
    start_date: date
    preferred_time_slot: str = Field(..., description="HH:MM, 24-hour clock")
    student_latitude: float = Field(..., ge=-90, le=90)
    student_longitude: float = Field(..., ge=-180, le=180)
    students: List[StudentRef] = Field(default_factory=list)

    @field_validator("start_date", mode="before")
    @classmethod
    def _enforce_date_only(cls, v: object) -> object:
        if isinstance(v, str):
            candidate = v.strip()
            if not DATE_ONLY_REGEX.fullmatch(candidate):
                raise ValueError("start_date must be a YYYY-MM-DD date-only string")
            return candidate
        return v

    @field_validator("preferred_time_slot")
    @classmethod
    def _normalize_time_slot(cls, v: str) -> str:
        match = TIME_SLOT_REGEX.fullmatch(v.strip())
        if not match:
            raise ValueError(f"Invalid time format: {v}. Expected HH:MM format.")
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise ValueError(f"Invalid time of day: {v}")
        return f"{hour:02d}:{minute:02d}"

    @property
    def student_location(self) -> Coordinates:
        return Coordinates(self.student_latitude, self.student_longitude)


class AssignmentOutcomeResponse(BaseModel):
    """Serialized AssignmentOutcome."""

    model_config = ConfigDict(use_enum_values=True)

    status: PurchaseStatus
    purchase_id: str
    assigned_trainer_id: Optional[str] = None
    zone_id: Optional[str] = None
    session_count: int = 0
    message: Optional[str] = None

    @classmethod
    def from_outcome(cls, outcome: AssignmentOutcome) -> "AssignmentOutcomeResponse":
        return cls(
            status=outcome.status,
            purchase_id=outcome.purchase_id,
            assigned_trainer_id=outcome.assigned_trainer_id,
            zone_id=outcome.zone_id,
            session_count=outcome.session_count,
            message=outcome.message,
        )
