"""End-to-end assignment runs against an in-memory database."""

from datetime import date, timedelta
from unittest.mock import Mock

import pytest

from conftest import StaticDirectory
from trainer_assignment.core.enums import PurchaseStatus
from trainer_assignment.core.exceptions import ConflictException, TrainerDirectoryError
from trainer_assignment.domain.value_objects import Coordinates
from trainer_assignment.models import CalendarEntry, CoursePurchase, PurchaseSession, ScheduleSlot
from trainer_assignment.monitoring.prometheus_metrics import REGISTRY
from trainer_assignment.services import AutoTrainerAssignmentService, SessionVisibilitySync
from trainer_assignment.services.auto_trainer_assignment_service import (
    NO_TRAINER_MESSAGE,
    NO_ZONE_MESSAGE,
)

# About 100km north of the default zone
FAR_AWAY = Coordinates(13.9, 77.5946)

pytestmark = pytest.mark.integration


def _outcome_count(result: str) -> float:
    value = REGISTRY.get_sample_value("trainer_assignment_outcomes_total", {"result": result})
    return value or 0.0


@pytest.fixture
def zone(make_zone):
    return make_zone(name="Central")


@pytest.fixture
def service_for(db):
    def _build(directory, **kwargs):
        return AutoTrainerAssignmentService(db, fetch_trainers=directory, **kwargs)

    return _build


class TestAssigned:
    def test_weekday_daily_purchase_is_assigned(self, db, zone, make_trainer, make_request, service_for):
        directory = StaticDirectory([make_trainer("trainer-1", zone_id=zone.id)])
        before = _outcome_count("ASSIGNED")

        outcome = service_for(directory).process_purchase(make_request())

        assert outcome.status == PurchaseStatus.ASSIGNED
        assert outcome.assigned_trainer_id == "trainer-1"
        assert outcome.zone_id == zone.id
        assert outcome.session_count == 10
        assert _outcome_count("ASSIGNED") == before + 1

        purchase = db.query(CoursePurchase).one()
        assert purchase.status == "ASSIGNED"
        assert purchase.operator_franchise_id is None

        sessions = db.query(PurchaseSession).order_by(PurchaseSession.session_number).all()
        assert [s.session_date for s in sessions] == [
            date(2024, 1, 1) + timedelta(days=i) for i in range(10)
        ]
        assert {s.session_time for s in sessions} == {"09:00"}
        assert {s.session_type for s in sessions} == {"offline"}

        slots = db.query(ScheduleSlot).filter_by(trainer_id="trainer-1").all()
        assert len(slots) == 10
        assert {slot.booking_id for slot in slots} == {"booking-1"}

        entries = db.query(CalendarEntry).all()
        assert len(entries) == 10
        assert {e.student_id for e in entries} == {"student-1"}
        assert {e.duration_minutes for e in entries} == {40}

    def test_directory_called_with_zone_scope(self, zone, make_trainer, make_request, service_for):
        directory = StaticDirectory([make_trainer(zone_id=zone.id)])
        service_for(directory).process_purchase(make_request())
        assert directory.calls == [
            {
                "franchise_id": None,
                "zone_id": zone.id,
                "course_id": "course-python-101",
                "is_active": True,
            }
        ]

    def test_franchise_zone_uses_franchise_trainers(self, db, make_zone, make_trainer, make_request, service_for):
        zone = make_zone(name="Franchise Central", franchise_id="f-1")
        directory = StaticDirectory(
            [
                make_trainer("company", zone_id=zone.id),
                make_trainer("franchise", zone_id=zone.id, franchise_id="f-1"),
            ]
        )
        outcome = service_for(directory).process_purchase(make_request())
        assert outcome.assigned_trainer_id == "franchise"
        assert directory.calls[0]["franchise_id"] == "f-1"
        assert db.query(CoursePurchase).one().operator_franchise_id == "f-1"

    def test_nearest_trainer_wins(self, zone, make_trainer, make_request, service_for):
        directory = StaticDirectory(
            [
                make_trainer("far", zone_id=zone.id, location=Coordinates(13.0, 77.62)),
                make_trainer("near", zone_id=zone.id, location=Coordinates(12.972, 77.595)),
            ]
        )
        assert service_for(directory).process_purchase(make_request()).assigned_trainer_id == "near"

    def test_sunday_only_purchase(self, db, zone, make_trainer, make_request, service_for):
        directory = StaticDirectory([make_trainer(zone_id=zone.id)])
        outcome = service_for(directory).process_purchase(
            make_request(delivery_mode="SUNDAY_ONLY", total_sessions=10)
        )
        assert outcome.status == PurchaseStatus.ASSIGNED
        sessions = db.query(PurchaseSession).order_by(PurchaseSession.session_number).all()
        assert sessions[0].session_date == date(2024, 1, 7)
        assert [s.session_time for s in sessions[:2]] == ["09:00", "09:40"]
        assert sessions[-1].session_date == date(2024, 2, 4)

    def test_hybrid_purchase_persists_metadata(self, db, zone, make_trainer, make_request, service_for):
        directory = StaticDirectory([make_trainer(zone_id=zone.id)])
        outcome = service_for(directory).process_purchase(
            make_request(class_type="HYBRID", total_sessions=30)
        )
        assert outcome.status == PurchaseStatus.ASSIGNED
        sessions = db.query(PurchaseSession).order_by(PurchaseSession.session_number).all()
        assert len(sessions) == 30
        assert sum(1 for s in sessions if s.session_type == "online") == 18
        assert sessions[0].booking_metadata == {
            "isBookable": False,
            "isFixedTime": True,
            "requiresBooking": False,
        }
        offline = next(s for s in sessions if s.session_type == "offline")
        assert offline.booking_metadata["initialTimeSlot"] == "09:00"
        entry = db.query(CalendarEntry).filter_by(purchase_session_id=offline.id).one()
        assert entry.booking_metadata == offline.booking_metadata


class TestNotAssigned:
    def test_no_trainers_waitlists_with_sessions(self, db, zone, make_request, service_for):
        before = _outcome_count("WAITLISTED")
        outcome = service_for(StaticDirectory()).process_purchase(make_request())

        assert outcome.status == PurchaseStatus.WAITLISTED
        assert outcome.assigned_trainer_id is None
        assert outcome.message == NO_TRAINER_MESSAGE
        assert outcome.session_count == 10
        assert db.query(PurchaseSession).count() == 10
        assert db.query(ScheduleSlot).count() == 0
        assert db.query(CalendarEntry).count() == 0
        assert _outcome_count("WAITLISTED") == before + 1

    def test_busy_trainer_waitlists(self, db, zone, make_trainer, make_request, service_for):
        db.add(
            ScheduleSlot(
                trainer_id="trainer-1",
                booking_id="earlier",
                slot_date=date(2024, 1, 5),
                timeslot="09:00",
                status="booked",
            )
        )
        db.commit()
        directory = StaticDirectory([make_trainer(zone_id=zone.id)])
        outcome = service_for(directory).process_purchase(make_request())
        assert outcome.status == PurchaseStatus.WAITLISTED
        assert db.query(ScheduleSlot).count() == 1

    def test_outside_every_zone(self, db, zone, make_request, service_for):
        directory = StaticDirectory()
        outcome = service_for(directory).process_purchase(
            make_request(student_latitude=FAR_AWAY.latitude, student_longitude=FAR_AWAY.longitude)
        )
        assert outcome.status == PurchaseStatus.SERVICE_NOT_AVAILABLE
        assert outcome.message == NO_ZONE_MESSAGE
        assert outcome.zone_id is None
        assert outcome.session_count == 0
        assert directory.calls == []
        assert db.query(PurchaseSession).count() == 0

    def test_inactive_zone_is_ignored(self, make_zone, make_request, service_for):
        make_zone(name="Closed", is_active=False)
        outcome = service_for(StaticDirectory()).process_purchase(make_request())
        assert outcome.status == PurchaseStatus.SERVICE_NOT_AVAILABLE

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"class_type": "HYBRID", "total_sessions": 20}, "HYBRID class type requires exactly 30 sessions"),
            ({"total_sessions": 15}, "Total sessions must be 10, 20, or 30"),
            (
                {"class_type": "ONE_ON_TWO"},
                "ONE_ON_TWO class type requires exactly 2 students",
            ),
        ],
    )
    def test_invalid_purchase(self, db, zone, make_request, service_for, overrides, message):
        directory = StaticDirectory()
        outcome = service_for(directory).process_purchase(make_request(**overrides))
        assert outcome.status == PurchaseStatus.INVALID_PURCHASE
        assert outcome.message == message
        assert directory.calls == []
        assert db.query(CoursePurchase).one().status == "INVALID_PURCHASE"
        assert db.query(PurchaseSession).count() == 0


class TestFailures:
    def test_directory_failure_persists_nothing(self, db, zone, make_request, service_for):
        directory = Mock(side_effect=TrainerDirectoryError("down"))
        with pytest.raises(TrainerDirectoryError):
            service_for(directory).process_purchase(make_request())
        db.rollback()
        assert db.query(CoursePurchase).count() == 0
        assert db.query(PurchaseSession).count() == 0

    def test_duplicate_booking_is_rejected(self, db, zone, make_trainer, make_request, service_for):
        directory = StaticDirectory([make_trainer(zone_id=zone.id)])
        service = service_for(directory)
        service.process_purchase(make_request())

        with pytest.raises(ConflictException):
            service.process_purchase(make_request())
        assert db.query(CoursePurchase).count() == 1
        assert len(directory.calls) == 1

    def test_visibility_sync_failure_keeps_assignment(self, db, zone, make_trainer, make_request, service_for):
        sync = Mock(spec=SessionVisibilitySync)
        sync.sync_purchase_sessions.side_effect = RuntimeError("calendar down")
        before = REGISTRY.get_sample_value("trainer_assignment_visibility_sync_failures_total") or 0.0

        directory = StaticDirectory([make_trainer(zone_id=zone.id)])
        outcome = service_for(directory, visibility_sync=sync).process_purchase(make_request())

        assert outcome.status == PurchaseStatus.ASSIGNED
        assert db.query(ScheduleSlot).count() == 10
        assert db.query(CalendarEntry).count() == 0
        assert REGISTRY.get_sample_value("trainer_assignment_visibility_sync_failures_total") == before + 1

    def test_sync_can_be_disabled(self, db, zone, make_trainer, make_request, service_for):
        sync = Mock(spec=SessionVisibilitySync)
        directory = StaticDirectory([make_trainer(zone_id=zone.id)])
        service_for(directory, visibility_sync=sync, sync_enabled=False).process_purchase(make_request())
        sync.sync_purchase_sessions.assert_not_called()

    def test_student_location_is_checked_for_travel(self, zone, make_trainer, make_request, service_for):
        directory = StaticDirectory([make_trainer(zone_id=zone.id, location=FAR_AWAY)])
        outcome = service_for(directory).process_purchase(make_request())
        assert outcome.status == PurchaseStatus.WAITLISTED


class TestTransactionBoundaries:
    def test_no_transaction_is_open_during_directory_fetch(self, db, zone, make_trainer, make_request, service_for):
        seen = []

        def fetch_trainers(**kwargs):
            seen.append(db.in_transaction())
            return [make_trainer(zone_id=zone.id)]

        outcome = service_for(fetch_trainers).process_purchase(make_request())

        assert seen == [False]
        assert outcome.status == PurchaseStatus.ASSIGNED

    def test_commit_starts_a_fresh_transaction(self, db, zone, make_trainer, make_request, service_for, monkeypatch):
        service = service_for(StaticDirectory([make_trainer(zone_id=zone.id)]))
        original_commit = service._commit
        seen = []

        def commit(*args, **kwargs):
            seen.append(db.in_transaction())
            return original_commit(*args, **kwargs)

        monkeypatch.setattr(service, "_commit", commit)
        outcome = service.process_purchase(make_request())

        assert seen == [False]
        assert outcome.status == PurchaseStatus.ASSIGNED
