"""
Concurrent bookings of the same trainer.

Whatever the interleaving, at most one purchase may own a trainer slot and
every loser still ends in a persisted WAITLISTED purchase.
"""

import threading
from datetime import date

import pytest
from sqlalchemy.orm import sessionmaker

from conftest import StaticDirectory, add_zone, build_request, build_trainer
from trainer_assignment.core.enums import PurchaseStatus
from trainer_assignment.models import CoursePurchase, PurchaseSession, ScheduleSlot
from trainer_assignment.monitoring.prometheus_metrics import REGISTRY
from trainer_assignment.services import AutoTrainerAssignmentService, EligibilityResult
from trainer_assignment.services.auto_trainer_assignment_service import (
    INSERT_LOST_MESSAGE,
    RECHECK_LOST_MESSAGE,
)

pytestmark = pytest.mark.integration


def _conflicts(stage: str) -> float:
    value = REGISTRY.get_sample_value(
        "trainer_assignment_schedule_slot_conflicts_total", {"stage": stage}
    )
    return value or 0.0


def _steal_slot(factory, booking_id="rival"):
    """Book 2024-01-03 09:00 for trainer-1 from a separate session and commit."""
    rival = factory()
    try:
        rival.add(
            ScheduleSlot(
                trainer_id="trainer-1",
                booking_id=booking_id,
                slot_date=date(2024, 1, 3),
                timeslot="09:00",
                status="booked",
            )
        )
        rival.commit()
    finally:
        rival.close()


@pytest.fixture
def factory(file_engine):
    return sessionmaker(bind=file_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def assignment_db(factory):
    session = factory()
    yield session
    session.close()


@pytest.fixture
def service(factory, assignment_db):
    setup = factory()
    try:
        zone = add_zone(setup)
    finally:
        setup.close()
    directory = StaticDirectory([build_trainer("trainer-1", zone_id=zone.id)])
    return AutoTrainerAssignmentService(assignment_db, fetch_trainers=directory)


class TestRecheck:
    def test_slot_taken_after_filtering_demotes_to_waitlisted(
        self, factory, assignment_db, service, monkeypatch, make_request
    ):
        checker = service.eligibility_checker
        original_filter = checker.filter_eligible_trainers

        def filter_then_lose_slot(*args, **kwargs):
            eligible = original_filter(*args, **kwargs)
            _steal_slot(factory)
            return eligible

        monkeypatch.setattr(checker, "filter_eligible_trainers", filter_then_lose_slot)
        before = _conflicts("recheck")

        outcome = service.process_purchase(make_request())

        assert outcome.status == PurchaseStatus.WAITLISTED
        assert outcome.message == RECHECK_LOST_MESSAGE
        assert outcome.session_count == 10
        assert _conflicts("recheck") == before + 1
        assert assignment_db.query(ScheduleSlot).filter_by(booking_id="booking-1").count() == 0
        assert assignment_db.query(PurchaseSession).count() == 10


class TestInsertConflict:
    def test_unique_constraint_rejects_and_waitlists(
        self, factory, assignment_db, service, monkeypatch, make_request
    ):
        checker = service.eligibility_checker
        original_filter = checker.filter_eligible_trainers

        def filter_then_lose_slot(*args, **kwargs):
            eligible = original_filter(*args, **kwargs)
            _steal_slot(factory)
            # Re-check reads a stale snapshot, only the constraint can catch it
            monkeypatch.setattr(
                checker, "check_eligibility", lambda *a, **k: EligibilityResult(True, [])
            )
            return eligible

        monkeypatch.setattr(checker, "filter_eligible_trainers", filter_then_lose_slot)
        before = _conflicts("insert")

        outcome = service.process_purchase(make_request())

        assert outcome.status == PurchaseStatus.WAITLISTED
        assert outcome.message == INSERT_LOST_MESSAGE
        assert outcome.assigned_trainer_id is None
        assert outcome.session_count == 10
        assert _conflicts("insert") == before + 1

        purchase = assignment_db.query(CoursePurchase).one()
        assert purchase.status == "WAITLISTED"
        assert assignment_db.query(PurchaseSession).filter_by(purchase_id=purchase.id).count() == 10
        assert assignment_db.query(ScheduleSlot).count() == 1


class TestConcurrentAttempts:
    def test_only_one_of_two_concurrent_purchases_gets_the_trainer(self, factory):
        setup = factory()
        zone = add_zone(setup)
        setup.close()

        barrier = threading.Barrier(2, timeout=10)
        trainer = build_trainer("trainer-1", zone_id=zone.id)

        def fetch_trainers(**kwargs):
            barrier.wait()
            return [trainer]

        outcomes = {}
        errors = []

        def attempt(booking_id):
            session = factory()
            try:
                service = AutoTrainerAssignmentService(session, fetch_trainers=fetch_trainers)
                request = build_request(
                    external_booking_id=booking_id,
                    students=[{"id": f"student-{booking_id}"}],
                )
                outcomes[booking_id] = service.process_purchase(request)
            except Exception as exc:  # surfaced by the assertions below
                errors.append(exc)
            finally:
                session.close()

        threads = [threading.Thread(target=attempt, args=(b,)) for b in ("booking-a", "booking-b")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert errors == []
        statuses = sorted(outcome.status.value for outcome in outcomes.values())
        assert statuses == ["ASSIGNED", "WAITLISTED"]

        check = factory()
        try:
            slots = check.query(ScheduleSlot).filter_by(trainer_id="trainer-1").all()
            assert len(slots) == 10
            assert len({(s.slot_date, s.timeslot) for s in slots}) == 10
            winner = next(b for b, o in outcomes.items() if o.is_assigned)
            assert {s.booking_id for s in slots} == {winner}
            assert check.query(PurchaseSession).count() == 20
        finally:
            check.close()
