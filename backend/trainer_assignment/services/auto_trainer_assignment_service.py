# backend/trainer_assignment/services/auto_trainer_assignment_service.py
"""
Auto trainer assignment.

One call handles one purchase and always ends in exactly one persisted
status: ASSIGNED, WAITLISTED, SERVICE_NOT_AVAILABLE or INVALID_PURCHASE.

Double-booking is kept out in three steps:
1. candidates are filtered against the ledger outside any transaction
2. the selected trainer is re-checked inside the commit transaction
3. the ledger's unique (trainer, date, timeslot) constraint rejects
   whatever slipped past both checks

Anything raised from here (schedule invariant, trainer directory, database)
means the attempt did not resolve and may be retried as a whole.
"""

from typing import Callable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import PurchaseStatus
from ..core.exceptions import ConflictException, SlotConflictException
from ..domain.outcome import AssignmentOutcome
from ..domain.schedule import SessionDescriptor
from ..domain.trainer import TrainerCandidate
from ..models.course_purchase import CoursePurchase
from ..models.purchase_session import PurchaseSession
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.assignment import AutoAssignmentRequest
from .base import BaseService
from .purchase_validator import validate_purchase
from .session_schedule_generator import generate_schedule
from .session_visibility_sync import SessionVisibilitySync
from .trainer_eligibility_checker import TrainerEligibilityChecker
from .trainer_selector import select_best
from .zone_resolver import ResolvedZone, ZoneResolver

# fetch_trainers(franchise_id=..., zone_id=..., course_id=..., is_active=...)
FetchTrainers = Callable[..., Sequence[TrainerCandidate]]

NO_ZONE_MESSAGE = "Student location is outside every active service zone"
NO_TRAINER_MESSAGE = "No eligible trainer is available for this schedule"
RECHECK_LOST_MESSAGE = "Selected trainer is no longer available"
INSERT_LOST_MESSAGE = "Trainer slots were taken by a concurrent booking"


class AutoTrainerAssignmentService(BaseService):
    """
    Service that turns a purchase request into a persisted assignment outcome.
    """

    def __init__(
        self,
        db: Session,
        fetch_trainers: FetchTrainers,
        visibility_sync: Optional[SessionVisibilitySync] = None,
        sync_enabled: Optional[bool] = None,
    ):
        super().__init__(db)
        self.fetch_trainers = fetch_trainers
        self.purchase_repository = RepositoryFactory.create_course_purchase_repository(db)
        self.session_repository = RepositoryFactory.create_purchase_session_repository(db)
        self.slot_repository = RepositoryFactory.create_schedule_slot_repository(db)
        self.zone_resolver = ZoneResolver(RepositoryFactory.create_zone_repository(db))
        self.eligibility_checker = TrainerEligibilityChecker(self.slot_repository)
        self.visibility_sync = visibility_sync or SessionVisibilitySync(db)
        self.sync_enabled = settings.visibility_sync_enabled if sync_enabled is None else sync_enabled

    @BaseService.measure_operation("process_purchase")
    def process_purchase(self, request: AutoAssignmentRequest) -> AssignmentOutcome:
        """
        Run one assignment attempt end to end.

        Args:
            request: Validated purchase request

        Returns:
            The persisted outcome

        Raises:
            ConflictException: the booking id was already processed
            ScheduleInvariantError: the generated schedule broke its own rules
            TrainerDirectoryError: candidates could not be fetched
            ServiceException: database failure during commit
        """
        self.log_operation(
            "process_purchase",
            booking_id=request.external_booking_id,
            course_id=request.course_id,
            class_type=request.class_type.value,
            delivery_mode=request.delivery_mode.value,
        )
        self._ensure_not_processed(request.external_booking_id)

        validation = validate_purchase(
            request.class_type, request.total_sessions, request.delivery_mode, request.students
        )
        if not validation.valid:
            return self._record_without_sessions(
                request, PurchaseStatus.INVALID_PURCHASE, validation.message, zone=None
            )

        student_location = request.student_location
        zone = self.zone_resolver.resolve(student_location)
        if zone is None:
            return self._record_without_sessions(
                request, PurchaseStatus.SERVICE_NOT_AVAILABLE, NO_ZONE_MESSAGE, zone=None
            )

        sessions = generate_schedule(
            request.class_type,
            request.delivery_mode,
            request.total_sessions,
            request.start_date,
            request.preferred_time_slot,
        )

        self._end_read_transaction()
        candidates = self.fetch_trainers(
            franchise_id=zone.operator.franchise_id,
            zone_id=zone.zone_id,
            course_id=request.course_id,
            is_active=True,
        )
        eligible = self.eligibility_checker.filter_eligible_trainers(
            candidates, request.course_id, zone, sessions, student_location
        )
        selected = select_best(eligible, student_location, sessions)
        self.logger.info(
            "Found %d/%d eligible trainer(s)",
            len(eligible),
            len(candidates),
            extra={
                "booking_id": request.external_booking_id,
                "zone_id": zone.zone_id,
                "selected_trainer_id": selected.id if selected else None,
            },
        )

        self._end_read_transaction()
        try:
            purchase, persisted = self._commit(request, zone, sessions, selected)
        except SlotConflictException:
            prometheus_metrics.inc_slot_conflict("insert")
            self.logger.warning(
                "Lost slot race for trainer %s; recording WAITLISTED",
                selected.id if selected else None,
                extra={"booking_id": request.external_booking_id},
            )
            with self.transaction():
                purchase = self._stage_purchase(
                    request, zone, PurchaseStatus.WAITLISTED, None, INSERT_LOST_MESSAGE
                )
                persisted = self.session_repository.create_batch(
                    purchase.id, request.external_booking_id, sessions
                )

        outcome = self._outcome(purchase, len(persisted))
        if outcome.is_assigned:
            self._sync_visibility(purchase, persisted)
        return outcome

    def _commit(
        self,
        request: AutoAssignmentRequest,
        zone: ResolvedZone,
        sessions: List[SessionDescriptor],
        selected: Optional[TrainerCandidate],
    ) -> Tuple[CoursePurchase, List[PurchaseSession]]:
        with self.transaction():
            status, trainer_id, message = PurchaseStatus.WAITLISTED, None, NO_TRAINER_MESSAGE
            if selected is not None:
                recheck = self.eligibility_checker.check_eligibility(
                    selected, request.course_id, zone, sessions, request.student_location
                )
                if recheck.eligible:
                    status, trainer_id, message = PurchaseStatus.ASSIGNED, selected.id, None
                else:
                    prometheus_metrics.inc_slot_conflict("recheck")
                    self.logger.warning(
                        "Trainer %s failed re-check: %s",
                        selected.id,
                        "; ".join(recheck.reasons),
                        extra={"booking_id": request.external_booking_id},
                    )
                    message = RECHECK_LOST_MESSAGE

            purchase = self._stage_purchase(request, zone, status, trainer_id, message)
            persisted = self.session_repository.create_batch(
                purchase.id, request.external_booking_id, sessions
            )
            if status == PurchaseStatus.ASSIGNED:
                self.slot_repository.book_slots(
                    trainer_id,
                    request.external_booking_id,
                    [session.slot_key for session in sessions],
                )
        return purchase, persisted

    def _end_read_transaction(self) -> None:
        """
        Close the transaction the session autobegan for read-only lookups.

        Nothing is pending at this point, so rolling back only returns the
        connection to the pool. The directory fetch and the optimistic filter
        never run inside the commit transaction.
        """
        if self.db.in_transaction():
            self.db.rollback()

    def _record_without_sessions(
        self,
        request: AutoAssignmentRequest,
        status: PurchaseStatus,
        message: Optional[str],
        zone: Optional[ResolvedZone],
    ) -> AssignmentOutcome:
        with self.transaction():
            purchase = self._stage_purchase(request, zone, status, None, message)
        return self._outcome(purchase, 0)

    def _stage_purchase(
        self,
        request: AutoAssignmentRequest,
        zone: Optional[ResolvedZone],
        status: PurchaseStatus,
        trainer_id: Optional[str],
        message: Optional[str],
    ) -> CoursePurchase:
        purchase = CoursePurchase(
            external_booking_id=request.external_booking_id,
            course_id=request.course_id,
            class_type=request.class_type.value,
            total_sessions=request.total_sessions,
            delivery_mode=request.delivery_mode.value,
            start_date=request.start_date,
            preferred_time_slot=request.preferred_time_slot,
            student_latitude=request.student_latitude,
            student_longitude=request.student_longitude,
            students=[student.model_dump() for student in request.students],
            operator_franchise_id=zone.operator.franchise_id if zone else None,
            zone_id=zone.zone_id if zone else None,
            assigned_trainer_id=trainer_id,
            status=status.value,
            status_message=message,
        )
        return self.purchase_repository.add(purchase)

    def _ensure_not_processed(self, external_booking_id: str) -> None:
        existing = self.purchase_repository.get_by_external_booking_id(external_booking_id)
        if existing is not None:
            raise ConflictException(
                f"Booking {external_booking_id} was already processed",
                details={"purchase_id": existing.id, "status": existing.status},
            )

    def _outcome(self, purchase: CoursePurchase, session_count: int) -> AssignmentOutcome:
        status = PurchaseStatus(purchase.status)
        prometheus_metrics.inc_assignment_outcome(status.value)
        self.logger.info(
            "Purchase %s resolved as %s",
            purchase.id,
            status.value,
            extra={
                "purchase_id": purchase.id,
                "booking_id": purchase.external_booking_id,
                "trainer_id": purchase.assigned_trainer_id,
                "outcome": status.value,
            },
        )
        return AssignmentOutcome(
            status=status,
            purchase_id=purchase.id,
            assigned_trainer_id=purchase.assigned_trainer_id,
            zone_id=purchase.zone_id,
            session_count=session_count,
            message=purchase.status_message,
        )

    def _sync_visibility(self, purchase: CoursePurchase, sessions: Sequence[PurchaseSession]) -> None:
        if not self.sync_enabled:
            return
        try:
            result = self.visibility_sync.sync_purchase_sessions(purchase, sessions)
        except Exception as exc:
            # The assignment is already committed; the calendar catches up on re-sync
            prometheus_metrics.inc_visibility_sync_failure()
            self.logger.error(
                "Calendar sync failed for purchase %s: %s",
                purchase.id,
                exc,
                exc_info=True,
                extra={"purchase_id": purchase.id},
            )
            return
        if not result.success:
            prometheus_metrics.inc_visibility_sync_failure()
