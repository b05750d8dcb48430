# backend/tests/conftest.py
"""
Pytest configuration for TrialDesk.

Every test gets a fresh in-memory SQLite schema. Services run against the
real ORM so reservation, rollback and family atomicity are exercised end to
end; collaborators are only mocked where a test needs to force a failure.
"""

import os
import sys

# Set testing mode BEFORE any trialdesk imports
os.environ["is_testing"] = "true"

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from datetime import date, datetime
from typing import Callable, Iterable, List, Optional

import pytest
from sqlalchemy.orm import Session, sessionmaker

from trialdesk.core.actor import Actor
from trialdesk.core.enums import RoleName, TeacherType
from trialdesk.database import Base, create_db_engine
import trialdesk.models  # noqa: F401
from trialdesk.models.family import FamilyGroup
from trialdesk.models.teacher import TeacherProfile
from trialdesk.models.teacher_slot import TeacherSlot
from trialdesk.models.trial import TrialStudent
from trialdesk.schemas.trial import FamilyTrialCreate, TrialStudentCreate
from trialdesk.services.trial_booking_service import TrialBookingService

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"


@pytest.fixture
def engine():
    test_engine = create_db_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Data factories
# ============================================================================


@pytest.fixture
def make_teacher(db: Session) -> Callable[..., TeacherProfile]:
    def _make(
        teacher_id: str,
        teacher_type: str = TeacherType.KIDS.value,
        last_assigned_at: Optional[datetime] = None,
        is_active: bool = True,
    ) -> TeacherProfile:
        teacher = TeacherProfile(
            id=teacher_id,
            full_name=f"Teacher {teacher_id}",
            teacher_type=teacher_type,
            is_active=is_active,
            last_assigned_at=last_assigned_at,
        )
        db.add(teacher)
        db.commit()
        return teacher

    return _make


@pytest.fixture
def make_slots(db: Session) -> Callable[..., List[TeacherSlot]]:
    def _make(
        teacher_id: str,
        slot_date: date,
        time_slots: Iterable[str],
        is_available: bool = True,
    ) -> List[TeacherSlot]:
        slots = [
            TeacherSlot(
                teacher_id=teacher_id,
                slot_date=slot_date,
                time_slot=time_slot,
                is_available=is_available,
                is_booked=False,
            )
            for time_slot in time_slots
        ]
        db.add_all(slots)
        db.commit()
        return slots

    return _make


# ============================================================================
# Actors
# ============================================================================


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id="admin-1", role=RoleName.ADMIN)


@pytest.fixture
def sales() -> Actor:
    return Actor(user_id="sales-1", role=RoleName.SALES)


@pytest.fixture
def supervisor() -> Actor:
    return Actor(user_id="supervisor-1", role=RoleName.SUPERVISOR)


@pytest.fixture
def as_teacher() -> Callable[[str], Actor]:
    def _actor(teacher_id: str) -> Actor:
        return Actor(user_id=teacher_id, role=RoleName.TEACHER)

    return _actor


# ============================================================================
# Bookings
# ============================================================================


@pytest.fixture
def book_student(db: Session, sales: Actor) -> Callable[..., TrialStudent]:
    def _book(
        teacher_id: Optional[str],
        trial_date: date,
        trial_time: str,
        name: str = "Omar",
        teacher_type: str = TeacherType.KIDS.value,
    ) -> TrialStudent:
        request = TrialStudentCreate(
            name=name,
            teacher_type=teacher_type,
            trial_date=trial_date,
            trial_time=trial_time,
            teacher_id=teacher_id,
        )
        return TrialBookingService(db).book_individual_trial(sales, request)

    return _book


@pytest.fixture
def book_family(db: Session, sales: Actor) -> Callable[..., FamilyGroup]:
    def _book(
        teacher_id: Optional[str],
        trial_date: date,
        trial_time: str,
        member_names: Iterable[str] = ("Adam", "Laila", "Yusuf"),
        teacher_type: str = TeacherType.KIDS.value,
    ) -> FamilyGroup:
        request = FamilyTrialCreate(
            parent_name="Mona",
            teacher_type=teacher_type,
            trial_date=trial_date,
            trial_time=trial_time,
            teacher_id=teacher_id,
            students=[{"name": name} for name in member_names],
        )
        return TrialBookingService(db).book_family_trial(sales, request)

    return _book
