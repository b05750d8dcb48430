# backend/trialdesk/repositories/__init__.py
"""
Repository layer for TrialDesk.

Repositories own all SQL. They flush but never commit; services own the
transaction boundary.
"""

from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .job_repository import JobRepository
from .session_repository import SessionRepository
from .slot_repository import SlotRepository
from .status_change_repository import StatusChangeRepository
from .teacher_repository import TeacherRepository
from .trial_repository import FamilyGroupRepository, TrialStudentRepository

__all__ = [
    "BaseRepository",
    "RepositoryFactory",
    "JobRepository",
    "SessionRepository",
    "SlotRepository",
    "StatusChangeRepository",
    "TeacherRepository",
    "FamilyGroupRepository",
    "TrialStudentRepository",
]
