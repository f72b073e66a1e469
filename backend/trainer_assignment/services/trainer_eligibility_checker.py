"""
Trainer eligibility.

Every rule is evaluated so the caller gets the full list of reasons, not
just the first one. The availability rule reads the schedule ledger and is
advisory: the ledger's uniqueness constraint has the final word at commit.
"""

from dataclasses import dataclass, field
import logging
from typing import List, Sequence

from ..core.constants import MAX_CERTIFIED_COURSES
from ..domain.schedule import SessionDescriptor
from ..domain.trainer import TrainerCandidate
from ..domain.value_objects import Coordinates, Franchise
from ..repositories.schedule_slot_repository import ScheduleSlotRepository
from ..utils.geo import haversine_km
from .zone_resolver import ResolvedZone

logger = logging.getLogger(__name__)


@dataclass
class EligibilityResult:
    eligible: bool
    reasons: List[str] = field(default_factory=list)


class TrainerEligibilityChecker:
    def __init__(self, slot_repository: ScheduleSlotRepository):
        self.slot_repository = slot_repository

    def check_eligibility(
        self,
        trainer: TrainerCandidate,
        course_id: str,
        zone: ResolvedZone,
        sessions: Sequence[SessionDescriptor],
        student_location: Coordinates,
    ) -> EligibilityResult:
        """
        Evaluate one trainer against a session batch.

        Operator, zone and travel rules only apply when the batch contains
        an offline session.
        """
        reasons: List[str] = []

        if not trainer.is_active:
            reasons.append("Trainer is not active")

        if any(session.is_offline for session in sessions):
            reasons.extend(self._offline_reasons(trainer, zone, student_location))

        if course_id not in trainer.certified_course_ids:
            reasons.append("Trainer is not certified for this course")

        certified_count = len(trainer.certified_course_ids)
        if certified_count > MAX_CERTIFIED_COURSES:
            reasons.append(
                f"Trainer has more than {MAX_CERTIFIED_COURSES} certified courses ({certified_count})"
            )

        reasons.extend(self._availability_reasons(trainer, sessions))

        return EligibilityResult(eligible=not reasons, reasons=reasons)

    def filter_eligible_trainers(
        self,
        trainers: Sequence[TrainerCandidate],
        course_id: str,
        zone: ResolvedZone,
        sessions: Sequence[SessionDescriptor],
        student_location: Coordinates,
    ) -> List[TrainerCandidate]:
        """Trainers with no reasons against them, in input order."""
        eligible = []
        for trainer in trainers:
            result = self.check_eligibility(trainer, course_id, zone, sessions, student_location)
            if result.eligible:
                eligible.append(trainer)
            else:
                logger.debug(
                    "Trainer %s rejected: %s",
                    trainer.id,
                    "; ".join(result.reasons),
                    extra={"trainer_id": trainer.id, "course_id": course_id},
                )
        return eligible

    @staticmethod
    def _offline_reasons(
        trainer: TrainerCandidate, zone: ResolvedZone, student_location: Coordinates
    ) -> List[str]:
        reasons = []
        trainer_operator = trainer.operator
        if trainer_operator.kind != zone.operator.kind:
            reasons.append(
                f"Trainer operator ({trainer_operator.kind}) does not match "
                f"zone operator ({zone.operator.kind})"
            )
        if isinstance(zone.operator, Franchise) and trainer.franchise_id != zone.operator.id:
            reasons.append("Trainer does not belong to the same franchise")

        if trainer.zone_id != zone.zone_id:
            reasons.append("Trainer does not belong to the same zone")

        if trainer.location is not None:
            distance = haversine_km(student_location, trainer.location)
            if distance > zone.radius_km:
                reasons.append(
                    f"Trainer is too far from student location "
                    f"({distance:.2f}km > {zone.radius_km:g}km)"
                )
        return reasons

    def _availability_reasons(
        self, trainer: TrainerCandidate, sessions: Sequence[SessionDescriptor]
    ) -> List[str]:
        conflicts = self.slot_repository.find_conflicts(
            trainer.id, [session.slot_key for session in sessions]
        )
        return [
            f"Trainer has conflict on {slot.slot_date.isoformat()} at {slot.timeslot}"
            for slot in conflicts
        ]
