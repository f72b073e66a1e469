"""Pick one trainer from an already-filtered candidate list."""

import logging
from typing import Optional, Sequence

from ..domain.schedule import SessionDescriptor
from ..domain.trainer import TrainerCandidate
from ..domain.value_objects import Coordinates
from ..utils.geo import haversine_km

logger = logging.getLogger(__name__)


def select_best(
    eligible_trainers: Sequence[TrainerCandidate],
    student_location: Coordinates,
    sessions: Sequence[SessionDescriptor],
) -> Optional[TrainerCandidate]:
    """
    Nearest trainer for batches with offline sessions, else the first one.

    Equidistant trainers resolve to the earliest in input order. When no
    eligible trainer has a known location the first candidate is used.
    """
    if not eligible_trainers:
        return None
    if len(eligible_trainers) == 1:
        return eligible_trainers[0]

    if not any(session.is_offline for session in sessions):
        return eligible_trainers[0]

    located = [t for t in eligible_trainers if t.location is not None]
    if not located:
        logger.debug("No eligible trainer has a location; using first candidate")
        return eligible_trainers[0]

    # min() keeps the first of equal keys
    return min(located, key=lambda t: haversine_km(student_location, t.location))
