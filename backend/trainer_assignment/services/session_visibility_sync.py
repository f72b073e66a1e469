"""
Mirror assigned sessions into the visible calendar.

Runs after the assignment commit in its own transaction. The calendar is
eventually consistent with the purchase: a failed sync leaves the
assignment untouched and can be repeated, since entries are keyed by
purchase session id.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.constants import SESSION_DURATION_MINUTES
from ..domain.value_objects import Coordinates
from ..models.calendar_entry import CalendarEntry
from ..models.course_purchase import CoursePurchase
from ..models.purchase_session import PurchaseSession
from ..repositories.factory import RepositoryFactory
from .base import BaseService


@dataclass(frozen=True)
class SyncError:
    session_id: str
    error: str


@dataclass
class SessionSyncResult:
    created: int = 0
    updated: int = 0
    errors: List[SyncError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


class SessionVisibilitySync(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.calendar_repository = RepositoryFactory.create_calendar_entry_repository(db)

    @BaseService.measure_operation("sync_purchase_sessions")
    def sync_purchase_sessions(
        self, purchase: CoursePurchase, sessions: Sequence[PurchaseSession]
    ) -> SessionSyncResult:
        """
        Upsert one calendar entry per session of an assigned purchase.

        Problems with the purchase itself (no trainer, no student, bad
        coordinates) are reported in ``errors`` without touching storage.
        Database failures propagate after rollback.
        """
        result = SessionSyncResult()

        student_id = self._primary_student_id(purchase)
        if purchase.assigned_trainer_id is None:
            result.errors.append(SyncError("unknown", "Purchase has no assigned trainer"))
        if student_id is None:
            result.errors.append(SyncError("unknown", "Purchase has no student"))
        try:
            Coordinates(purchase.student_latitude, purchase.student_longitude)
        except (TypeError, ValueError):
            result.errors.append(
                SyncError(
                    "unknown",
                    f"Invalid student coordinates: lat={purchase.student_latitude}, "
                    f"lng={purchase.student_longitude}",
                )
            )
        if result.errors:
            self.logger.error(
                "Skipping calendar sync for purchase %s: %s",
                purchase.id,
                "; ".join(e.error for e in result.errors),
                extra={"purchase_id": purchase.id},
            )
            return result

        with self.transaction():
            existing = self.calendar_repository.get_by_session_ids(s.id for s in sessions)
            for session in sessions:
                entry = existing.get(session.id)
                if entry is None:
                    entry = CalendarEntry(purchase_session_id=session.id)
                    self.db.add(entry)
                    result.created += 1
                else:
                    result.updated += 1
                self._apply(entry, purchase, session, student_id)
            self.db.flush()

        self.logger.info(
            "Synced %d session(s) to calendar (%d created, %d updated)",
            len(sessions),
            result.created,
            result.updated,
            extra={"purchase_id": purchase.id},
        )
        return result

    @staticmethod
    def _primary_student_id(purchase: CoursePurchase) -> Optional[str]:
        students = purchase.students or []
        if not students:
            return None
        first = students[0]
        student_id = first.get("id") if isinstance(first, dict) else first
        return str(student_id) if student_id else None

    @staticmethod
    def _apply(
        entry: CalendarEntry,
        purchase: CoursePurchase,
        session: PurchaseSession,
        student_id: str,
    ) -> None:
        entry.purchase_id = purchase.id
        entry.trainer_id = purchase.assigned_trainer_id
        entry.student_id = student_id
        entry.course_id = purchase.course_id
        entry.scheduled_date = session.session_date
        entry.scheduled_time = session.session_time
        entry.duration_minutes = SESSION_DURATION_MINUTES
        entry.session_type = session.session_type
        entry.status = session.status
        entry.student_latitude = purchase.student_latitude
        entry.student_longitude = purchase.student_longitude
        entry.booking_metadata = dict(session.booking_metadata) if session.booking_metadata else None
