# backend/trialdesk/repositories/factory.py
"""
Repository Factory for TrialDesk

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from sqlalchemy.orm import Session

from .job_repository import JobRepository
from .session_repository import SessionRepository
from .slot_repository import SlotRepository
from .status_change_repository import StatusChangeRepository
from .teacher_repository import TeacherRepository
from .trial_repository import FamilyGroupRepository, TrialStudentRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_slot_repository(db: Session) -> SlotRepository:
        return SlotRepository(db)

    @staticmethod
    def create_teacher_repository(db: Session) -> TeacherRepository:
        return TeacherRepository(db)

    @staticmethod
    def create_trial_student_repository(db: Session) -> TrialStudentRepository:
        return TrialStudentRepository(db)

    @staticmethod
    def create_family_group_repository(db: Session) -> FamilyGroupRepository:
        return FamilyGroupRepository(db)

    @staticmethod
    def create_session_repository(db: Session) -> SessionRepository:
        return SessionRepository(db)

    @staticmethod
    def create_status_change_repository(db: Session) -> StatusChangeRepository:
        return StatusChangeRepository(db)

    @staticmethod
    def create_job_repository(db: Session) -> JobRepository:
        return JobRepository(db)
