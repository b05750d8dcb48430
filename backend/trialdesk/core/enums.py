# backend/trialdesk/core/enums.py
"""
Core enums for the TrialDesk scheduling engine.

Roles are a closed set supplied by the authentication layer. Statuses,
teacher categories and reason codes mirror the values stored in the database.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles an acting user can hold."""

    TEACHER = "teacher"
    SALES = "sales"
    ADMIN = "admin"
    SUPERVISOR = "supervisor"


class TrialStatus(str, Enum):
    """Lifecycle statuses shared by individual trials and family groups."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    TRIAL_COMPLETED = "trial-completed"
    TRIAL_GHOSTED = "trial-ghosted"
    AWAITING_PAYMENT = "awaiting-payment"
    PAID = "paid"
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    DROPPED = "dropped"


class TeacherType(str, Enum):
    """Qualification tag used to match teachers with trial requests."""

    KIDS = "kids"
    ADULT = "adult"
    MIXED = "mixed"
    EXPERT = "expert"


class Platform(str, Enum):
    ZOOM = "zoom"
    GOOGLE_MEET = "google-meet"


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SessionType(str, Enum):
    TRIAL = "trial"
    PAID = "paid"


class RescheduleReason(str, Enum):
    """Reason codes offered by the reschedule form."""

    TRIAL_COMPLETED_BY_TEACHER = "trial-completed-by-teacher"
    BY_STUDENT_CLIENT = "by-student-client"


class TrialOutcome(str, Enum):
    """Outcomes a teacher can submit after running a trial."""

    COMPLETED = "completed"
    GHOSTED = "ghosted"


class EntityType(str, Enum):
    STUDENT = "student"
    FAMILY = "family"
