"""
Database models for the assignment engine.

- CoursePurchase / PurchaseSession: contracts and their generated calendars
- Zone: circular service areas with an operator
- ScheduleSlot: per-trainer occupancy ledger (double-booking guard)
- CalendarEntry: best-effort visible mirror of assigned sessions
"""

from .calendar_entry import CalendarEntry
from .course_purchase import CoursePurchase
from .purchase_session import PurchaseSession
from .schedule_slot import SLOT_UNIQUE_CONSTRAINT, ScheduleSlot
from .zone import Zone

__all__ = [
    "CalendarEntry",
    "CoursePurchase",
    "PurchaseSession",
    "SLOT_UNIQUE_CONSTRAINT",
    "ScheduleSlot",
    "Zone",
]
