from .outcome import AssignmentOutcome
from .schedule import SessionDescriptor, SessionMetadata
from .trainer import TrainerCandidate
from .value_objects import COMPANY, Company, Coordinates, Franchise, Operator, operator_from_franchise_id

__all__ = [
    "AssignmentOutcome",
    "COMPANY",
    "Company",
    "Coordinates",
    "Franchise",
    "Operator",
    "SessionDescriptor",
    "SessionMetadata",
    "TrainerCandidate",
    "operator_from_franchise_id",
]
