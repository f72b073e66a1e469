"""Trainer candidates as handed over by the trainer directory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional

from .value_objects import Coordinates, Operator, operator_from_franchise_id


@dataclass(frozen=True)
class TrainerCandidate:
    """
    Read-only view of a trainer owned by the external directory.

    ``franchise_id`` keeps the directory's nullable shape; use ``operator``
    for comparisons.
    """

    id: str
    is_active: bool
    franchise_id: Optional[str]
    zone_id: Optional[str]
    certified_course_ids: FrozenSet[str]
    location: Optional[Coordinates] = None

    @property
    def operator(self) -> Operator:
        return operator_from_franchise_id(self.franchise_id)
