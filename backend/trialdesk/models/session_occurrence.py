"""Session occurrence ledger entries (trial and paid sessions)."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.sql import func
import ulid

from ..core.enums import SessionStatus, SessionType
from ..database import Base

logger = logging.getLogger(__name__)


class SessionOccurrence(Base):
    """
    One scheduled meeting.

    Individual sessions carry ``student_id``; a family trial carries
    ``family_group_id`` and is shared by every member. ``original_date`` and
    ``original_time`` are written once, on the first reschedule.
    """

    __tablename__ = "session_occurrences"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    student_id = Column(
        String(26), ForeignKey("trial_students.id", ondelete="CASCADE"), nullable=True
    )
    family_group_id = Column(
        String(26), ForeignKey("family_groups.id", ondelete="CASCADE"), nullable=True
    )
    teacher_id = Column(String(26), ForeignKey("teacher_profiles.id"), nullable=True)

    session_type = Column(String(10), nullable=False, default=SessionType.TRIAL.value)
    session_number = Column(Integer, nullable=False, default=1)
    scheduled_date = Column(Date, nullable=True)
    scheduled_time = Column(String(5), nullable=True)
    status = Column(String(20), nullable=False, default=SessionStatus.SCHEDULED.value)

    reschedule_count = Column(Integer, nullable=False, default=0, server_default=text("0"))
    original_date = Column(Date, nullable=True)
    original_time = Column(String(5), nullable=True)
    reschedule_reason = Column(String(64), nullable=True)

    actual_minutes = Column(Integer, nullable=True)
    completion_notes = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "status IN ('scheduled', 'completed', 'cancelled')",
            name="ck_session_occurrences_status",
        ),
        CheckConstraint(
            "session_type IN ('trial', 'paid')", name="ck_session_occurrences_type"
        ),
        CheckConstraint(
            "student_id IS NOT NULL OR family_group_id IS NOT NULL",
            name="ck_session_occurrences_owner",
        ),
        CheckConstraint("reschedule_count >= 0", name="ck_session_occurrences_reschedules"),
        Index("ix_session_occurrences_student_number", "student_id", "session_number"),
        Index("ix_session_occurrences_family", "family_group_id"),
    )

    def record_reschedule(self, new_date: Any, new_time: str, reason: str) -> None:
        """Move the occurrence, keeping the first-ever position."""
        if self.original_date is None and self.original_time is None:
            self.original_date = self.scheduled_date or new_date
            self.original_time = self.scheduled_time or new_time
        self.reschedule_count = (self.reschedule_count or 0) + 1
        self.reschedule_reason = reason
        self.scheduled_date = new_date
        self.scheduled_time = new_time

    def complete(self, actual_minutes: int, notes: Optional[str]) -> None:
        self.status = SessionStatus.COMPLETED.value
        self.actual_minutes = actual_minutes
        self.completion_notes = notes
        self.completed_at = datetime.now(timezone.utc)
        logger.info(f"Session {self.id} marked as completed")

    def cancel(self, notes: Optional[str] = None) -> None:
        self.status = SessionStatus.CANCELLED.value
        if notes:
            self.completion_notes = notes
        logger.info(f"Session {self.id} cancelled")

    def __repr__(self) -> str:
        return (
            f"<SessionOccurrence {self.id} #{self.session_number} {self.session_type} "
            f"{self.scheduled_date} {self.scheduled_time} status={self.status}>"
        )
