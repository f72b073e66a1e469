"""Data access for the visible calendar mirror."""

from typing import Dict, Iterable, List

from sqlalchemy.orm import Session

from ..models.calendar_entry import CalendarEntry
from .base_repository import BaseRepository


class CalendarEntryRepository(BaseRepository[CalendarEntry]):
    def __init__(self, db: Session):
        super().__init__(db, CalendarEntry)

    def get_by_session_ids(self, session_ids: Iterable[str]) -> Dict[str, CalendarEntry]:
        ids = list(session_ids)
        if not ids:
            return {}
        query = self._build_query().filter(CalendarEntry.purchase_session_id.in_(ids))
        return {entry.purchase_session_id: entry for entry in self._execute_query(query)}

    def find_by_purchase(self, purchase_id: str) -> List[CalendarEntry]:
        query = (
            self._build_query()
            .filter(CalendarEntry.purchase_id == purchase_id)
            .order_by(CalendarEntry.scheduled_date, CalendarEntry.scheduled_time)
        )
        return self._execute_query(query)
