# backend/trialdesk/models/trial.py
"""
Trial student model.

An individual trial record. When ``family_group_id`` is set the student is a
member of a FamilyGroup and its schedule and status are written only through
the family aggregate.
"""

from __future__ import annotations

import logging

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import TrialStatus
from ..database import Base

logger = logging.getLogger(__name__)

STATUS_VALUES = ", ".join(f"'{s.value}'" for s in TrialStatus)


class TrialStudent(Base):
    """Trial record for one student."""

    __tablename__ = "trial_students"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    unique_id = Column(String(16), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=True)
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
    notes = Column(Text, nullable=True)

    family_group_id = Column(
        String(26), ForeignKey("family_groups.id", ondelete="CASCADE"), nullable=True, index=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    family_group = relationship("FamilyGroup", back_populates="members")
    assigned_teacher = relationship("TeacherProfile", foreign_keys=[assigned_teacher_id])

    __table_args__ = (CheckConstraint(f"status IN ({STATUS_VALUES})", name="ck_trial_students_status"),)

    @property
    def is_family_member(self) -> bool:
        return self.family_group_id is not None

    def __repr__(self) -> str:
        return (
            f"<TrialStudent {self.id} ({self.unique_id}) status={self.status} "
            f"trial={self.trial_date} {self.trial_time}>"
        )
