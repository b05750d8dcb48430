# backend/trialdesk/models/__init__.py
"""
SQLAlchemy models for TrialDesk.

Importing this package registers every table on ``Base.metadata`` so
``init_db`` and test fixtures can create the full schema.
"""

from .background_job import BackgroundJob
from .family import FamilyGroup
from .session_occurrence import SessionOccurrence
from .status_change import StatusChange
from .teacher import TeacherProfile
from .teacher_slot import TeacherSlot
from .trial import TrialStudent

__all__ = [
    "BackgroundJob",
    "FamilyGroup",
    "SessionOccurrence",
    "StatusChange",
    "TeacherProfile",
    "TeacherSlot",
    "TrialStudent",
]
