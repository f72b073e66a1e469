"""
Schedule slot ledger repository.

``book_slots`` is the only writer. It relies on the
(trainer_id, slot_date, timeslot) unique constraint and translates a
violation into ``SlotConflictException``; every read here is advisory.
"""

from datetime import date
from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT, UNAVAILABLE_SLOT_STATUSES
from ..core.enums import SlotStatus
from ..core.exceptions import RepositoryException, SlotConflictException
from ..models.schedule_slot import SLOT_UNIQUE_CONSTRAINT, ScheduleSlot
from .base_repository import BaseRepository

SlotKey = Tuple[date, str]


def is_slot_unique_violation(exc: IntegrityError) -> bool:
    """True when ``exc`` was raised by the ledger's uniqueness constraint."""
    diag = getattr(getattr(exc, "orig", None), "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        return constraint_name == SLOT_UNIQUE_CONSTRAINT

    # Drivers without diag (SQLite) only expose the message
    message = str(getattr(exc, "orig", exc))
    return SLOT_UNIQUE_CONSTRAINT in message or (
        "UNIQUE constraint failed" in message and "schedule_slots.trainer_id" in message
    )


class ScheduleSlotRepository(BaseRepository[ScheduleSlot]):
    def __init__(self, db: Session):
        super().__init__(db, ScheduleSlot)

    def find_conflicts(self, trainer_id: str, slots: Iterable[SlotKey]) -> List[ScheduleSlot]:
        """
        Booked or blocked ledger rows for ``trainer_id`` at any of ``slots``.

        One query per trainer over the distinct dates; exact (date, time)
        matching happens in memory.
        """
        wanted: Set[SlotKey] = set(slots)
        if not wanted:
            return []
        dates = sorted({slot_date for slot_date, _ in wanted})

        query = self._build_query().filter(
            ScheduleSlot.trainer_id == trainer_id,
            ScheduleSlot.slot_date.in_(dates),
            ScheduleSlot.status.in_(UNAVAILABLE_SLOT_STATUSES),
        )
        rows = self._execute_query(query)
        conflicts = [row for row in rows if (row.slot_date, row.timeslot) in wanted]
        conflicts.sort(key=lambda row: (row.slot_date, row.timeslot))
        return conflicts

    def find_by_trainer(
        self,
        trainer_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
        limit: int = DEFAULT_QUERY_LIMIT,
        offset: int = 0,
    ) -> List[ScheduleSlot]:
        query = self._build_query().filter(ScheduleSlot.trainer_id == trainer_id)
        if start_date is not None:
            query = query.filter(ScheduleSlot.slot_date >= start_date)
        if end_date is not None:
            query = query.filter(ScheduleSlot.slot_date <= end_date)
        if status is not None:
            query = query.filter(ScheduleSlot.status == status)
        query = (
            query.order_by(ScheduleSlot.slot_date, ScheduleSlot.timeslot)
            .offset(offset)
            .limit(min(limit, MAX_QUERY_LIMIT))
        )
        return self._execute_query(query)

    def book_slots(
        self, trainer_id: str, booking_id: str, slots: Iterable[SlotKey]
    ) -> List[ScheduleSlot]:
        """
        Insert one booked row per slot and flush.

        Raises:
            SlotConflictException: another booking already holds one of the slots.
                The session is left needing a rollback; the caller's transaction
                context is expected to perform it.
            RepositoryException: any other database failure
        """
        rows = [
            ScheduleSlot(
                trainer_id=trainer_id,
                booking_id=booking_id,
                slot_date=slot_date,
                timeslot=timeslot,
                status=SlotStatus.BOOKED.value,
            )
            for slot_date, timeslot in slots
        ]
        try:
            self.db.add_all(rows)
            self.db.flush()
        except IntegrityError as exc:
            if is_slot_unique_violation(exc):
                self.logger.warning(
                    "Slot insert rejected by uniqueness constraint",
                    extra={"trainer_id": trainer_id, "booking_id": booking_id},
                )
                raise SlotConflictException(
                    details={"trainer_id": trainer_id, "booking_id": booking_id}
                ) from exc
            self.logger.error("Integrity error booking slots: %s", exc, exc_info=True)
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as exc:
            self.logger.error(f"Error booking slots for trainer {trainer_id}: {str(exc)}")
            raise RepositoryException(f"Failed to book slots: {str(exc)}") from exc
        return rows

    def count_for_booking(self, booking_id: str) -> int:
        return self.count(booking_id=booking_id)
