"""Data access for course purchases."""

from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..core.constants import DEFAULT_QUERY_LIMIT, MAX_QUERY_LIMIT
from ..models.course_purchase import CoursePurchase
from .base_repository import BaseRepository


class CoursePurchaseRepository(BaseRepository[CoursePurchase]):
    def __init__(self, db: Session):
        super().__init__(db, CoursePurchase)

    def add(self, purchase: CoursePurchase) -> CoursePurchase:
        """Stage a fully-built purchase and flush to obtain its id."""
        self.db.add(purchase)
        self.db.flush()
        return purchase

    def get_by_external_booking_id(self, external_booking_id: str) -> Optional[CoursePurchase]:
        return self.find_one_by(external_booking_id=external_booking_id)

    def get_with_sessions(self, purchase_id: str) -> Optional[CoursePurchase]:
        query = (
            self._build_query()
            .options(selectinload(CoursePurchase.sessions))
            .filter(CoursePurchase.id == purchase_id)
        )
        return query.first()

    def find_by_status(
        self, status: str, limit: int = DEFAULT_QUERY_LIMIT, offset: int = 0
    ) -> List[CoursePurchase]:
        query = (
            self._build_query()
            .filter(CoursePurchase.status == status)
            .order_by(CoursePurchase.created_at, CoursePurchase.id)
            .offset(offset)
            .limit(min(limit, MAX_QUERY_LIMIT))
        )
        return self._execute_query(query)

    def find_by_trainer(self, trainer_id: str) -> List[CoursePurchase]:
        return self.find_by(assigned_trainer_id=trainer_id)

    def status_counts(self) -> Dict[str, int]:
        rows = (
            self.db.query(CoursePurchase.status, func.count(CoursePurchase.id))
            .group_by(CoursePurchase.status)
            .all()
        )
        return {status: count for status, count in rows}
