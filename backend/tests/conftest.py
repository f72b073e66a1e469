# backend/tests/conftest.py
"""
Pytest configuration for the assignment engine.

Every test gets its own SQLite database; nothing here can reach a real
PostgreSQL instance.
"""

import os

# Settings are read at import time, so pin them before any package import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TRAINER_DIRECTORY_BACKOFF_SECONDS"] = "0"
os.environ["VISIBILITY_SYNC_ENABLED"] = "true"
os.environ.setdefault("CI", "true")

from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from trainer_assignment.core.enums import ClassType, DeliveryMode
from trainer_assignment.database import Base
from trainer_assignment.domain.trainer import TrainerCandidate
from trainer_assignment.domain.value_objects import Coordinates
from trainer_assignment.models import Zone
from trainer_assignment.schemas.assignment import AutoAssignmentRequest

# Central Bengaluru; the default zone is centred here
CITY_CENTER = Coordinates(12.9716, 77.5946)
COURSE_ID = "course-python-101"


@pytest.fixture
def engine() -> Engine:
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def file_engine(tmp_path) -> Engine:
    """File-backed engine for tests that need one connection per thread."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'assignment.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory: sessionmaker) -> Session:
    session = session_factory()
    yield session
    session.rollback()
    session.close()


def add_zone(
    session: Session,
    *,
    name: str = "Central",
    franchise_id: Optional[str] = None,
    center: Coordinates = CITY_CENTER,
    radius_km: float = 10.0,
    is_active: bool = True,
) -> Zone:
    zone = Zone(
        name=name,
        operator_franchise_id=franchise_id,
        center_lat=center.latitude,
        center_lng=center.longitude,
        radius_km=radius_km,
        is_active=is_active,
    )
    session.add(zone)
    session.commit()
    return zone


@pytest.fixture
def make_zone(db: Session) -> Callable[..., Zone]:
    def _make(**kwargs: Any) -> Zone:
        return add_zone(db, **kwargs)

    return _make


def build_trainer(
    trainer_id: str = "trainer-1",
    *,
    zone_id: Optional[str] = None,
    franchise_id: Optional[str] = None,
    is_active: bool = True,
    courses: Iterable[str] = (COURSE_ID,),
    location: Optional[Coordinates] = CITY_CENTER,
) -> TrainerCandidate:
    return TrainerCandidate(
        id=trainer_id,
        is_active=is_active,
        franchise_id=franchise_id,
        zone_id=zone_id,
        certified_course_ids=frozenset(courses),
        location=location,
    )


@pytest.fixture
def make_trainer() -> Callable[..., TrainerCandidate]:
    return build_trainer


def build_request(**overrides: Any) -> AutoAssignmentRequest:
    data: Dict[str, Any] = {
        "external_booking_id": "booking-1",
        "course_id": COURSE_ID,
        "class_type": ClassType.ONE_ON_ONE,
        "total_sessions": 10,
        "delivery_mode": DeliveryMode.WEEKDAY_DAILY,
        "start_date": date(2024, 1, 1),
        "preferred_time_slot": "09:00",
        "student_latitude": CITY_CENTER.latitude,
        "student_longitude": CITY_CENTER.longitude,
        "students": [{"id": "student-1", "name": "Asha"}],
    }
    data.update(overrides)
    return AutoAssignmentRequest(**data)


@pytest.fixture
def make_request() -> Callable[..., AutoAssignmentRequest]:
    return build_request


class StaticDirectory:
    """Stand-in for the trainer directory that records every call."""

    def __init__(self, trainers: Optional[List[TrainerCandidate]] = None):
        self.trainers = list(trainers or [])
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, **kwargs: Any) -> List[TrainerCandidate]:
        self.calls.append(kwargs)
        return list(self.trainers)


@pytest.fixture
def directory() -> StaticDirectory:
    return StaticDirectory()
