# backend/trainer_assignment/repositories/factory.py
"""
Repository Factory for the assignment engine.

Centralizes repository creation so services receive consistently
initialized repositories bound to the caller's session.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

if TYPE_CHECKING:
    from .calendar_entry_repository import CalendarEntryRepository
    from .purchase_repository import CoursePurchaseRepository
    from .purchase_session_repository import PurchaseSessionRepository
    from .schedule_slot_repository import ScheduleSlotRepository
    from .zone_repository import ZoneRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        return BaseRepository(db, model)

    @staticmethod
    def create_course_purchase_repository(db: Session) -> "CoursePurchaseRepository":
        from .purchase_repository import CoursePurchaseRepository

        return CoursePurchaseRepository(db)

    @staticmethod
    def create_purchase_session_repository(db: Session) -> "PurchaseSessionRepository":
        from .purchase_session_repository import PurchaseSessionRepository

        return PurchaseSessionRepository(db)

    @staticmethod
    def create_zone_repository(db: Session) -> "ZoneRepository":
        from .zone_repository import ZoneRepository

        return ZoneRepository(db)

    @staticmethod
    def create_schedule_slot_repository(db: Session) -> "ScheduleSlotRepository":
        """Create repository for the trainer schedule ledger."""
        from .schedule_slot_repository import ScheduleSlotRepository

        return ScheduleSlotRepository(db)

    @staticmethod
    def create_calendar_entry_repository(db: Session) -> "CalendarEntryRepository":
        from .calendar_entry_repository import CalendarEntryRepository

        return CalendarEntryRepository(db)
