"""Data access for purchase sessions."""

from typing import List, Sequence

from sqlalchemy.orm import Session

from ..core.enums import SessionStatus
from ..domain.schedule import SessionDescriptor
from ..models.purchase_session import PurchaseSession
from .base_repository import BaseRepository


class PurchaseSessionRepository(BaseRepository[PurchaseSession]):
    def __init__(self, db: Session):
        super().__init__(db, PurchaseSession)

    def create_batch(
        self,
        purchase_id: str,
        booking_id: str,
        sessions: Sequence[SessionDescriptor],
    ) -> List[PurchaseSession]:
        """
        Stage one row per generated session and flush them together.

        Args:
            purchase_id: Parent purchase (must already be flushed)
            booking_id: External booking id copied onto every session
            sessions: Generated descriptors, in session-number order

        Returns:
            The staged rows in the same order
        """
        rows = [
            PurchaseSession(
                purchase_id=purchase_id,
                booking_id=booking_id,
                session_number=descriptor.session_number,
                session_date=descriptor.session_date,
                session_time=descriptor.session_time,
                session_type=descriptor.session_type.value,
                status=SessionStatus.SCHEDULED.value,
                booking_metadata=descriptor.metadata_dict(),
            )
            for descriptor in sessions
        ]
        self.db.add_all(rows)
        self.db.flush()
        return rows

    def find_by_purchase(self, purchase_id: str) -> List[PurchaseSession]:
        query = (
            self._build_query()
            .filter(PurchaseSession.purchase_id == purchase_id)
            .order_by(PurchaseSession.session_number)
        )
        return self._execute_query(query)
