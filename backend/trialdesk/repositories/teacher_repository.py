# backend/trialdesk/repositories/teacher_repository.py
"""
Teacher Repository for TrialDesk

Candidate selection for round-robin assignment and maintenance of the
``last_assigned_at`` cursor.
"""

from datetime import date, datetime, timezone
import logging
from typing import Collection, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.teacher import TeacherProfile
from ..models.teacher_slot import TeacherSlot
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TeacherRepository(BaseRepository[TeacherProfile]):
    """Repository for teacher profiles."""

    def __init__(self, db: Session):
        super().__init__(db, TeacherProfile)
        self.logger = logging.getLogger(__name__)

    def find_candidates(
        self,
        teacher_type: str,
        slot_date: date,
        time_slot: str,
        exclude_ids: Collection[str] = (),
        teacher_id: Optional[str] = None,
    ) -> List[TeacherProfile]:
        """
        Active teachers of ``teacher_type`` with a free published slot.

        Ordered for round-robin: never-assigned first, then the oldest
        ``last_assigned_at``, then teacher id so ties are deterministic.
        """
        try:
            query = (
                self.db.query(TeacherProfile)
                .join(TeacherSlot, TeacherSlot.teacher_id == TeacherProfile.id)
                .filter(
                    TeacherProfile.teacher_type == teacher_type,
                    TeacherProfile.is_active.is_(True),
                    TeacherSlot.slot_date == slot_date,
                    TeacherSlot.time_slot == time_slot,
                    TeacherSlot.is_available.is_(True),
                    TeacherSlot.is_booked.is_(False),
                )
            )
            if teacher_id is not None:
                query = query.filter(TeacherProfile.id == teacher_id)
            if exclude_ids:
                query = query.filter(TeacherProfile.id.notin_(list(exclude_ids)))
            return query.order_by(
                TeacherProfile.last_assigned_at.is_(None).desc(),
                TeacherProfile.last_assigned_at.asc(),
                TeacherProfile.id.asc(),
            ).all()
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error finding {teacher_type} candidates for {slot_date} {time_slot}: {str(e)}"
            )
            raise RepositoryException(f"Failed to find candidate teachers: {str(e)}")

    def touch_last_assigned(self, teacher_id: str, when: Optional[datetime] = None) -> None:
        try:
            self.db.query(TeacherProfile).filter(TeacherProfile.id == teacher_id).update(
                {TeacherProfile.last_assigned_at: when or datetime.now(timezone.utc)},
                synchronize_session="fetch",
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating last_assigned_at for {teacher_id}: {str(e)}")
            raise RepositoryException(f"Failed to update teacher cursor: {str(e)}")
