"""Data access for service zones."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..domain.value_objects import Company, Operator
from ..models.zone import Zone
from .base_repository import BaseRepository

_UNSET = object()


class ZoneRepository(BaseRepository[Zone]):
    """
    Zone lookups.

    Containment is decided in Python with the shared haversine helper so the
    resolver, eligibility and selection agree on every distance. These
    queries only narrow the candidate set.
    """

    def __init__(self, db: Session):
        super().__init__(db, Zone)

    def find_active(self, franchise_id: object = _UNSET) -> List[Zone]:
        """
        Active zones, optionally restricted to one operator scope.

        Args:
            franchise_id: Omit for every operator, ``None`` for company zones,
                or a franchise id for that franchise's zones
        """
        query = self._build_query().filter(Zone.is_active.is_(True))
        if franchise_id is None:
            query = query.filter(Zone.operator_franchise_id.is_(None))
        elif franchise_id is not _UNSET:
            query = query.filter(Zone.operator_franchise_id == franchise_id)
        return self._execute_query(query.order_by(Zone.id))

    def find_by_operator(self, operator: Operator) -> List[Zone]:
        if isinstance(operator, Company):
            return self.find_active(franchise_id=None)
        return self.find_active(franchise_id=operator.franchise_id)

    def find_company_operated(self) -> List[Zone]:
        return self.find_active(franchise_id=None)

    def find_by_name(self, name: str, franchise_id: Optional[str] = None) -> Optional[Zone]:
        query = self._build_query().filter(Zone.name == name)
        if franchise_id is None:
            query = query.filter(Zone.operator_franchise_id.is_(None))
        else:
            query = query.filter(Zone.operator_franchise_id == franchise_id)
        return query.first()
