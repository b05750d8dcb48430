# backend/trialdesk/models/family.py
"""
Family group aggregate.

Siblings booked together share one trial slot, one session occurrence and
one lifecycle status. Callers change the group through ``apply_status`` and
``apply_schedule``; both write the group row and every member row so the
members can never drift from the group.
"""

from __future__ import annotations

from datetime import date
import logging
from typing import Optional

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import TrialStatus
from ..database import Base
from .trial import STATUS_VALUES, TrialStudent

logger = logging.getLogger(__name__)


class FamilyGroup(Base):
    """Aggregate root for a family trial."""

    __tablename__ = "family_groups"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    unique_id = Column(String(16), nullable=False, unique=True)
    parent_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    country = Column(String(64), nullable=True)
    platform = Column(String(20), nullable=True)

    assigned_teacher_id = Column(String(26), ForeignKey("teacher_profiles.id"), nullable=True)
    assigned_sales_agent_id = Column(String(26), nullable=True)
    assigned_supervisor_id = Column(String(26), nullable=True)
    teacher_type = Column(String(20), nullable=False)

    trial_date = Column(Date, nullable=True)
    trial_time = Column(String(5), nullable=True)
    status = Column(String(20), nullable=False, default=TrialStatus.PENDING.value, index=True)
    student_count = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    members = relationship(
        "TrialStudent",
        back_populates="family_group",
        order_by="TrialStudent.name",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(f"status IN ({STATUS_VALUES})", name="ck_family_groups_status"),
        CheckConstraint("student_count >= 0", name="ck_family_groups_student_count"),
    )

    def add_member(self, student: TrialStudent) -> None:
        """Attach a student and inherit the group's schedule and status."""
        student.trial_date = self.trial_date
        student.trial_time = self.trial_time
        student.status = self.status
        student.assigned_teacher_id = self.assigned_teacher_id
        self.members.append(student)
        self.student_count = len(self.members)

    def apply_status(self, status: str) -> None:
        """Set the status on the group and every member."""
        self.status = status
        for member in self.members:
            member.status = status
        logger.info(f"Family {self.id} moved to {status} ({len(self.members)} members)")

    def apply_schedule(self, trial_date: Optional[date], trial_time: Optional[str]) -> None:
        """Set the trial position on the group and every member."""
        self.trial_date = trial_date
        self.trial_time = trial_time
        for member in self.members:
            member.trial_date = trial_date
            member.trial_time = trial_time

    def __repr__(self) -> str:
        return f"<FamilyGroup {self.id} ({self.unique_id}) members={self.student_count} status={self.status}>"
