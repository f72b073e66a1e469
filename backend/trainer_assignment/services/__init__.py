"""
Service layer for the assignment engine.

Services own transactions and logging; repositories below them only flush.
"""

from .auto_trainer_assignment_service import AutoTrainerAssignmentService
from .base import BaseService
from .purchase_validator import ValidationResult, validate_purchase
from .session_schedule_generator import generate_schedule
from .session_visibility_sync import SessionSyncResult, SessionVisibilitySync
from .trainer_eligibility_checker import EligibilityResult, TrainerEligibilityChecker
from .trainer_selector import select_best
from .zone_resolver import ResolvedZone, ZoneResolver

__all__ = [
    "AutoTrainerAssignmentService",
    "BaseService",
    "EligibilityResult",
    "ResolvedZone",
    "SessionSyncResult",
    "SessionVisibilitySync",
    "TrainerEligibilityChecker",
    "ValidationResult",
    "ZoneResolver",
    "generate_schedule",
    "select_best",
    "validate_purchase",
]
