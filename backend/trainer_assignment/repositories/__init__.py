"""
Repository layer for the assignment engine.

Repositories flush but never commit; services own the transaction.
"""

from .base_repository import BaseRepository
from .calendar_entry_repository import CalendarEntryRepository
from .factory import RepositoryFactory
from .purchase_repository import CoursePurchaseRepository
from .purchase_session_repository import PurchaseSessionRepository
from .schedule_slot_repository import ScheduleSlotRepository
from .zone_repository import ZoneRepository

__all__ = [
    "BaseRepository",
    "CalendarEntryRepository",
    "CoursePurchaseRepository",
    "PurchaseSessionRepository",
    "RepositoryFactory",
    "ScheduleSlotRepository",
    "ZoneRepository",
]
