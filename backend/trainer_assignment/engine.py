"""
Composition root.

Wires settings, logging, the database session and the trainer directory
client into an AutoTrainerAssignmentService for callers that only have a
purchase payload.
"""

import logging
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from .core.config import settings
from .core.logging_config import configure_logging
from .database import SessionLocal, get_engine
from .integrations.trainer_directory_client import TrainerDirectoryClient
from .schemas.assignment import AssignmentOutcomeResponse, AutoAssignmentRequest
from .services.auto_trainer_assignment_service import AutoTrainerAssignmentService, FetchTrainers

logger = logging.getLogger(__name__)


def build_assignment_service(
    db: Session, fetch_trainers: Optional[FetchTrainers] = None
) -> AutoTrainerAssignmentService:
    """Service bound to ``db``; defaults to the HTTP trainer directory."""
    return AutoTrainerAssignmentService(
        db,
        fetch_trainers=fetch_trainers or TrainerDirectoryClient().fetch_trainers,
    )


def assign_purchase(
    payload: Mapping[str, Any], fetch_trainers: Optional[FetchTrainers] = None
) -> AssignmentOutcomeResponse:
    """
    Validate ``payload`` and run one assignment attempt in a fresh session.

    Raises pydantic.ValidationError for malformed payloads; every other
    exception means the attempt did not resolve.
    """
    configure_logging(settings.log_level)
    request = AutoAssignmentRequest.model_validate(dict(payload))

    get_engine()
    db = SessionLocal()
    try:
        outcome = build_assignment_service(db, fetch_trainers).process_purchase(request)
    finally:
        db.close()

    return AssignmentOutcomeResponse.from_outcome(outcome)
