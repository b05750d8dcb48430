# backend/trialdesk/repositories/session_repository.py
"""Session occurrence queries for the history ledger."""

import logging
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import SessionType
from ..core.exceptions import RepositoryException
from ..models.session_occurrence import SessionOccurrence
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository[SessionOccurrence]):
    def __init__(self, db: Session):
        super().__init__(db, SessionOccurrence)
        self.logger = logging.getLogger(__name__)

    def get_trial_occurrence(
        self, *, student_id: Optional[str] = None, family_group_id: Optional[str] = None
    ) -> Optional[SessionOccurrence]:
        """The trial occurrence (session #1) owned by a student or a family."""
        try:
            query = self.db.query(SessionOccurrence).filter(
                SessionOccurrence.session_type == SessionType.TRIAL.value
            )
            if family_group_id is not None:
                query = query.filter(SessionOccurrence.family_group_id == family_group_id)
            else:
                query = query.filter(SessionOccurrence.student_id == student_id)
            return query.order_by(SessionOccurrence.session_number.asc()).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting trial occurrence: {str(e)}")
            raise RepositoryException(f"Failed to get trial occurrence: {str(e)}")

    def list_for_student(
        self, student_id: str, family_group_id: Optional[str] = None
    ) -> List[SessionOccurrence]:
        """Own occurrences plus the shared family occurrences, in ledger order."""
        try:
            owner = SessionOccurrence.student_id == student_id
            if family_group_id is not None:
                owner = or_(owner, SessionOccurrence.family_group_id == family_group_id)
            return (
                self.db.query(SessionOccurrence)
                .filter(owner)
                .order_by(
                    SessionOccurrence.session_number.asc(),
                    SessionOccurrence.scheduled_date.asc(),
                    SessionOccurrence.scheduled_time.asc(),
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing sessions for student {student_id}: {str(e)}")
            raise RepositoryException(f"Failed to list sessions: {str(e)}")

    def next_session_number(self, student_id: str, family_group_id: Optional[str] = None) -> int:
        try:
            owner = SessionOccurrence.student_id == student_id
            if family_group_id is not None:
                owner = or_(owner, SessionOccurrence.family_group_id == family_group_id)
            current = (
                self.db.query(func.max(SessionOccurrence.session_number)).filter(owner).scalar()
            )
            return (current or 0) + 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error computing next session number for {student_id}: {str(e)}")
            raise RepositoryException(f"Failed to compute session number: {str(e)}")
