"""Teacher profile used for trial assignment."""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, String, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class TeacherProfile(Base):
    """
    Teaching profile for a user with the teacher role.

    ``last_assigned_at`` is the round-robin cursor: the teacher whose last
    trial assignment is oldest (or who never had one) is preferred.
    """

    __tablename__ = "teacher_profiles"

    # Same id as the authenticated user
    id = Column(String(26), primary_key=True)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    teacher_type = Column(String(20), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    last_assigned_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    slots = relationship("TeacherSlot", back_populates="teacher", lazy="noload")

    __table_args__ = (
        CheckConstraint(
            "teacher_type IN ('kids', 'adult', 'mixed', 'expert')",
            name="ck_teacher_profiles_teacher_type",
        ),
        Index("ix_teacher_profiles_type_last_assigned", "teacher_type", "last_assigned_at"),
    )

    def __repr__(self) -> str:
        return f"<TeacherProfile {self.id} type={self.teacher_type}>"
