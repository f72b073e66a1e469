# backend/trainer_assignment/core/enums.py
"""
Core enums for the assignment engine.

All enums persisted to the database inherit from (str, Enum) so the stored
value is the explicit string, never the member name.
"""

from enum import Enum


class ClassType(str, Enum):
    """How many students share a trainer, or the mixed online/offline format."""

    ONE_ON_ONE = "ONE_ON_ONE"
    ONE_ON_TWO = "ONE_ON_TWO"
    ONE_ON_THREE = "ONE_ON_THREE"
    HYBRID = "HYBRID"


class DeliveryMode(str, Enum):
    """Calendar cadence of a purchase."""

    WEEKDAY_DAILY = "WEEKDAY_DAILY"
    SUNDAY_ONLY = "SUNDAY_ONLY"


class PurchaseStatus(str, Enum):
    """Terminal outcome of an assignment attempt."""

    ASSIGNED = "ASSIGNED"
    WAITLISTED = "WAITLISTED"
    SERVICE_NOT_AVAILABLE = "SERVICE_NOT_AVAILABLE"
    INVALID_PURCHASE = "INVALID_PURCHASE"


class SessionType(str, Enum):
    """Where a session takes place."""

    ONLINE = "online"
    OFFLINE = "offline"


class SessionStatus(str, Enum):
    """Lifecycle of a single scheduled session."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class SlotStatus(str, Enum):
    """Occupancy of a trainer's (date, timeslot) cell."""

    AVAILABLE = "available"
    BOOKED = "booked"
    BLOCKED = "blocked"


# Number of students each class type must carry
STUDENTS_PER_CLASS_TYPE = {
    ClassType.ONE_ON_ONE: 1,
    ClassType.ONE_ON_TWO: 2,
    ClassType.ONE_ON_THREE: 3,
}
