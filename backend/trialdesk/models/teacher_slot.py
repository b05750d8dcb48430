# backend/trialdesk/models/teacher_slot.py
"""
Teacher slot model.

One row per (teacher, date, time slot). Rows are created when a teacher
publishes availability and are only toggled afterwards, never deleted.
Reservation state lives on the row itself so a single conditional UPDATE
can claim it.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class TeacherSlot(Base):
    """Bookable unit of teacher capacity."""

    __tablename__ = "teacher_slots"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    teacher_id = Column(String(26), ForeignKey("teacher_profiles.id"), nullable=False)
    slot_date = Column(Date, nullable=False)
    time_slot = Column(String(5), nullable=False)  # "HH:MM"

    is_available = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    is_booked = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    # Student id or family group id holding the reservation
    occupant_id = Column(String(26), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    teacher = relationship("TeacherProfile", back_populates="slots")

    __table_args__ = (
        UniqueConstraint("teacher_id", "slot_date", "time_slot", name="uq_teacher_slot"),
        CheckConstraint(
            "is_booked = false OR occupant_id IS NOT NULL",
            name="ck_teacher_slots_booked_has_occupant",
        ),
        Index("ix_teacher_slots_date_time", "slot_date", "time_slot"),
        Index("ix_teacher_slots_occupant", "occupant_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<TeacherSlot {self.teacher_id} {self.slot_date} {self.time_slot} "
            f"available={self.is_available} booked={self.is_booked}>"
        )
