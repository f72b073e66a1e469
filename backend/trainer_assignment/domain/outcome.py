"""Result value returned by an assignment attempt."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import PurchaseStatus


@dataclass(frozen=True)
class AssignmentOutcome:
    """
    The persisted result of one attempt.

    ``status`` is the only field callers should branch on.
    """

    status: PurchaseStatus
    purchase_id: str
    assigned_trainer_id: Optional[str] = None
    zone_id: Optional[str] = None
    session_count: int = 0
    message: Optional[str] = None

    @property
    def is_assigned(self) -> bool:
        return self.status == PurchaseStatus.ASSIGNED
